"""
Python Project Handler - Full multi-file project generation.

One gateway call with a structured-output prompt. The JSON project is
extracted from a possibly-fenced block and repaired; an unparseable reply
is an LLMError. A requirements.txt is synthesised from ``dependencies``
when the model leaves it out.
"""

import logging
from typing import Any, Dict, List

from errors import LLMError
from routers.conversation_prompts import build_project_prompt

from ..payloads import CapabilityResponse, ProjectFile, ProjectPayload
from .base import CapabilityHandler

logger = logging.getLogger(__name__)

REQUIREMENTS_FILE = "requirements.txt"


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [line.strip() for line in value.splitlines() if line.strip()]
    if isinstance(value, list):
        return [str(v) for v in value if v is not None and str(v).strip()]
    return [str(value)]


def project_from_json(data: Dict[str, Any]) -> ProjectPayload:
    """Build a ProjectPayload from the model's JSON, normalizing loose fields."""
    files = []
    for entry in data.get("files") or []:
        if not isinstance(entry, dict):
            continue
        path = str(entry.get("path") or "").strip()
        if not path:
            continue
        files.append(ProjectFile(path=path, content=str(entry.get("content") or "")))

    return ProjectPayload(
        project_name=str(data.get("projectName") or "python-project"),
        description=str(data.get("description") or ""),
        framework=str(data.get("framework") or ""),
        dependencies=_as_list(data.get("dependencies")),
        files=files,
        setup_instructions=_as_list(data.get("setupInstructions")),
        run_command=str(data.get("runCommand") or ""),
    )


def ensure_requirements(project: ProjectPayload) -> bool:
    """Add requirements.txt from the dependency list if missing. Returns True if added."""
    if any(f.path.rsplit("/", 1)[-1] == REQUIREMENTS_FILE for f in project.files):
        return False
    content = "\n".join(project.dependencies)
    project.files.append(ProjectFile(path=REQUIREMENTS_FILE, content=content + "\n" if content else ""))
    return True


class PythonProjectHandler(CapabilityHandler):
    intent = "python-generation"
    module = ProjectPayload.module

    async def run(self, classification, message, context) -> CapabilityResponse:
        model = self.config.model_code
        reply = await self.llm.chat(
            [self.user_message(build_project_prompt(message, context.cross_project_patterns))],
            model=model,
            temperature=self.config.project_temperature,
            operation="Project generation",
        )
        data = self.parse_structured(reply, "Project generation", model)

        project = project_from_json(data)
        if not project.files:
            raise LLMError("Project generation returned no files", error_type="invalid", model=model)
        if ensure_requirements(project):
            logger.info(f"Synthesised {REQUIREMENTS_FILE} for {project.project_name}")

        return CapabilityResponse.of(project)
