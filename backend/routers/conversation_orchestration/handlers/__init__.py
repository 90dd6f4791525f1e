"""
Capability Handlers - One handler per primary intent.

Architecture:
    CapabilityRouter looks up the handler registered for the classified
    primary intent and awaits it. Exactly one handler runs per request.

Intent -> Module:
    consultation               - consultation-agent
    python-generation          - python-project-agent
    code-generation            - smart-code-agent (analysis call, then modification call)
    infrastructure-generation  - dockerfile-agent (analysis call, then Dockerfile call)
    image-generation           - generate-image
    code-analysis              - intelligent-code-analysis
    chat                       - intelligent-chat (default)
"""

from .base import CapabilityHandler
from .router import CapabilityRouter, build_default_router
from .consultation import ConsultationHandler
from .python_project import PythonProjectHandler
from .code_change import CodeChangeHandler
from .infrastructure import InfrastructureHandler
from .image import ImageHandler
from .code_analysis import CodeAnalysisHandler
from .chat import ChatHandler

__all__ = [
    "CapabilityHandler",
    "CapabilityRouter",
    "build_default_router",
    "ConsultationHandler",
    "PythonProjectHandler",
    "CodeChangeHandler",
    "InfrastructureHandler",
    "ImageHandler",
    "CodeAnalysisHandler",
    "ChatHandler",
]
