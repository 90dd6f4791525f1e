"""
Capability payloads - One dataclass per capability module.

CapabilityResponse pairs the module name with its payload. Each payload
exposes:
- to_dict(): the JSON shape returned under the envelope's ``data`` key
- text: the primary text stored as the assistant message (may be empty,
  which the assembler reports as an internal-consistency violation)
- generated_code: code/Dockerfile/manifest stored alongside the message
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class ConsultationPayload:
    message: str
    type: str = "advice"

    module = "consultation-agent"

    @property
    def text(self) -> str:
        return self.message

    @property
    def generated_code(self) -> Optional[str]:
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"success": True, "message": self.message, "content": self.message, "type": self.type}


@dataclass
class ProjectFile:
    path: str
    content: str

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "content": self.content}


@dataclass
class ProjectPayload:
    """Multi-file Python project produced by the project generator."""

    project_name: str
    description: str = ""
    framework: str = ""
    dependencies: List[str] = field(default_factory=list)
    files: List[ProjectFile] = field(default_factory=list)
    setup_instructions: List[str] = field(default_factory=list)
    run_command: str = ""

    module = "python-project-agent"

    @property
    def text(self) -> str:
        if not self.project_name:
            return ""
        lines = [f"Generated {self.project_name}"]
        if self.framework:
            lines[0] += f" ({self.framework})"
        if self.description:
            lines.append(self.description)
        if self.files:
            lines.append("Files: " + ", ".join(f.path for f in self.files))
        return "\n".join(lines)

    @property
    def generated_code(self) -> Optional[str]:
        return json.dumps(self.manifest(), indent=2)

    def file(self, path: str) -> Optional[ProjectFile]:
        for f in self.files:
            if f.path == path:
                return f
        return None

    def manifest(self) -> Dict[str, Any]:
        return {
            "projectName": self.project_name,
            "description": self.description,
            "framework": self.framework,
            "dependencies": list(self.dependencies),
            "files": [f.to_dict() for f in self.files],
            "setupInstructions": list(self.setup_instructions),
            "runCommand": self.run_command,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {"success": True, "projectData": self.manifest()}


@dataclass
class CodeChangePayload:
    code: str
    analysis: Dict[str, Any]
    explanation: str
    work_type: str
    steps: List[str] = field(default_factory=lambda: ["analyze-intent", "apply-modification"])

    module = "smart-code-agent"

    @property
    def text(self) -> str:
        return self.explanation

    @property
    def generated_code(self) -> Optional[str]:
        return self.code

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "code": self.code,
            "generatedCode": self.code,
            "finalCode": self.code,
            "analysis": self.analysis,
            "explanation": self.explanation,
            "smartWorkflow": {
                "workType": self.work_type,
                "analysis": self.analysis,
                "steps": list(self.steps),
                "completed": True,
            },
        }


@dataclass
class InfrastructurePayload:
    dockerfile: str
    analysis: Dict[str, Any]
    instructions: List[str] = field(
        default_factory=lambda: [
            "Place the Dockerfile in your project root",
            "Build: docker build -t your-app .",
            "Run: docker run -p 8080:8080 your-app",
        ]
    )

    module = "dockerfile-agent"

    @property
    def text(self) -> str:
        if not self.dockerfile:
            return ""
        language = self.analysis.get("detectedLanguage") or "your project"
        base_image = self.analysis.get("baseImage")
        summary = f"Generated a Dockerfile for {language}"
        if base_image:
            summary += f" based on {base_image}"
        return summary + "."

    @property
    def generated_code(self) -> Optional[str]:
        return self.dockerfile

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "agent": self.module,
            "analysis": self.analysis,
            "files": {"Dockerfile": self.dockerfile},
            "instructions": list(self.instructions),
        }


@dataclass
class ImagePayload:
    """Image capability result, passed through unchanged."""

    result: Dict[str, Any]

    module = "generate-image"

    @property
    def text(self) -> str:
        url = self.result.get("imageUrl")
        if not url:
            return ""
        return f"Generated image for: {self.result.get('prompt', '')}".strip()

    @property
    def generated_code(self) -> Optional[str]:
        return None

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.result)


@dataclass
class CodeAnalysisPayload:
    analysis: str
    # Static placeholders, not derived from the review
    quality_score: int = 75
    performance_score: int = 75

    module = "intelligent-code-analysis"

    @property
    def text(self) -> str:
        return self.analysis

    @property
    def generated_code(self) -> Optional[str]:
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "analysis": self.analysis,
            "quality_score": self.quality_score,
            "performance_score": self.performance_score,
        }


@dataclass
class ChatPayload:
    message: str

    module = "intelligent-chat"

    @property
    def text(self) -> str:
        return self.message

    @property
    def generated_code(self) -> Optional[str]:
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "content": self.message}


Payload = Union[
    ConsultationPayload,
    ProjectPayload,
    CodeChangePayload,
    InfrastructurePayload,
    ImagePayload,
    CodeAnalysisPayload,
    ChatPayload,
]


@dataclass
class CapabilityResponse:
    """Which module ran and what it produced."""

    module_name: str
    payload: Payload

    def __post_init__(self):
        if self.module_name != self.payload.module:
            raise ValueError(f"Payload {type(self.payload).__name__} does not belong to module {self.module_name}")

    @classmethod
    def of(cls, payload: Payload) -> "CapabilityResponse":
        return cls(module_name=payload.module, payload=payload)
