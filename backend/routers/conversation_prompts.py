"""
Sitewright Conversation Prompts - Prompt templates per capability

Contains:
- PLATFORM_CAPABILITIES: What the platform can build (embedded in consultation)
- build_consultation_prompt(): Advice / question answering
- build_project_prompt(): Structured JSON Python project generation
- build_change_analysis_prompt(): First code-change call (JSON analysis)
- build_modification_prompt(): Second code-change call (full replacement code)
- build_docker_analysis_prompt(): First Dockerfile call (JSON project analysis)
- build_dockerfile_prompt(): Second Dockerfile call (raw Dockerfile)
- CODE_REVIEW_SYSTEM_PROMPT: Code review instructions
- build_chat_system_prompt(): General assistant with live platform status
"""

import json
from typing import Any, Dict, List, Optional


PLATFORM_CAPABILITIES = """PLATFORM CAPABILITIES:
- Generate and edit complete websites (HTML, React/TSX) from chat
- Generate multi-file Python projects (Flask, FastAPI, Django, Streamlit, scripts)
- Generate production Dockerfiles
- Generate images for use in a site
- Review existing code for quality, security and performance"""


def _format_history(history: List[Dict[str, Any]]) -> str:
    if not history:
        return "No previous context"
    return "\n".join(f"{m.get('role', 'user')}: {m.get('content', '')}" for m in history)


def _fenced(code: Optional[str], limit: Optional[int] = None, empty: str = "No existing code yet") -> str:
    if not code:
        return empty
    body = code[:limit] if limit is not None else code
    return f"```\n{body}\n```"


def build_consultation_prompt(
    message: str,
    current_code: Optional[str],
    history: List[Dict[str, Any]],
    code_chars: int = 2000,
) -> str:
    """Consultation prompt: capability description, truncated code, recent turns."""
    return f"""You are an expert software architect and consultant. The user is asking for advice about their project.

{PLATFORM_CAPABILITIES}

CURRENT PROJECT:
{_fenced(current_code, code_chars)}

USER REQUEST: {message}

CONVERSATION HISTORY:
{_format_history(history)}

Provide expert advice that is:
1. Specific and actionable
2. Takes into account their existing project
3. Considers best practices and modern patterns
4. Offers 2-3 concrete recommendations
5. Explains the reasoning behind your suggestions

Be conversational, friendly, and helpful. Format your response clearly with bullet points or numbered lists."""


def build_project_prompt(message: str, patterns: Optional[List[Dict[str, Any]]] = None) -> str:
    """Structured-output prompt for a complete Python project."""
    pattern_lines = ""
    if patterns:
        names = [p.get("pattern_name") or p.get("name") for p in patterns]
        names = [n for n in names if n]
        if names:
            pattern_lines = "\nPATTERNS THAT WORKED FOR THIS USER BEFORE:\n" + "\n".join(f"- {n}" for n in names) + "\n"

    return f"""You are an expert Python developer. Generate a complete, runnable Python project for this request.

USER REQUEST: {message}
{pattern_lines}
Return ONLY a JSON object with this exact structure:
{{
  "projectName": "kebab-case-name",
  "description": "one sentence summary",
  "framework": "flask | fastapi | django | streamlit | script",
  "dependencies": ["package==version"],
  "files": [
    {{"path": "app.py", "content": "full file content"}},
    {{"path": "requirements.txt", "content": "one requirement per line"}}
  ],
  "setupInstructions": ["step 1", "step 2"],
  "runCommand": "python app.py"
}}

RULES:
1. Every file must be complete, no placeholders
2. Include requirements.txt listing every dependency
3. Include a README.md with setup and run steps
4. Escape newlines and quotes inside "content" so the JSON is valid"""


def build_change_analysis_prompt(message: str, current_code: Optional[str], code_chars: int = 3000) -> str:
    """First code-change call: what to change and why, as JSON."""
    return f"""You are an expert software architect analyzing a modification request.

CURRENT PROJECT:
{_fenced(current_code, code_chars, empty="No existing code")}

USER REQUEST: {message}

ANALYZE:
1. What specific element/component needs to be changed?
2. What type of change is being requested (color, layout, text, functionality)?
3. What files/sections are affected?
4. What's the minimal change needed?

Return a JSON object with:
{{
  "changeType": "style" | "content" | "structure" | "functionality",
  "targetElement": "description of what to change (e.g., 'header background color')",
  "targetSelector": "CSS selector or component name if identifiable",
  "modification": "specific change description",
  "reasoning": "why this interpretation"
}}"""


def build_modification_prompt(message: str, current_code: Optional[str], analysis: Dict[str, Any]) -> str:
    """Second code-change call: apply the analysis and return the full document."""
    return f"""You are an expert developer. Apply this specific modification to the existing code.

CURRENT CODE:
```
{current_code or '<!-- No existing code -->'}
```

MODIFICATION NEEDED:
- Target: {analysis.get('targetElement', '')}
- Change Type: {analysis.get('changeType', '')}
- Modification: {analysis.get('modification', '')}
- User Request: {message}

CRITICAL RULES:
1. If code exists, MODIFY it - don't create from scratch
2. Keep ALL existing functionality and structure
3. ONLY change what's requested
4. For style changes (colors, sizes), update only those attributes
5. Maintain all existing classes and content
6. Return the COMPLETE modified code, never a diff or a fragment
7. If there is no existing code, return a complete standalone HTML document

Return ONLY the complete updated code, ready to use."""


def build_docker_analysis_prompt(description: str) -> str:
    """First Dockerfile call: project analysis as JSON."""
    return f"""You are a Docker expert. Analyze this project and return ONLY a JSON object with the analysis.

Project: {description}

Return this exact JSON structure:
{{
  "detectedLanguage": "string",
  "detectedFramework": "string",
  "baseImage": "string (e.g., node:18-alpine)",
  "requiredPackages": ["array", "of", "system", "packages"],
  "buildSteps": ["array", "of", "build", "commands"],
  "exposedPorts": [8080],
  "environmentVariables": ["ENV_VAR_1", "ENV_VAR_2"],
  "volumeMounts": ["path/to/mount"]
}}"""


def _example_descriptions(entry: Dict[str, Any]) -> List[str]:
    """Descriptions from a knowledge entry's code_examples (list or JSON text)."""
    examples = entry.get("code_examples") or []
    if isinstance(examples, str):
        try:
            examples = json.loads(examples)
        except json.JSONDecodeError:
            return []
    if not isinstance(examples, list):
        return []
    return [ex["description"] for ex in examples if isinstance(ex, dict) and ex.get("description")]


def _format_docker_knowledge(entry: Dict[str, Any]) -> str:
    practices = "\n".join(_example_descriptions(entry))
    return f"{entry.get('title', '')}:\n{entry.get('content', '')}\n\nBest Practices:\n{practices}"


def build_dockerfile_prompt(analysis: Dict[str, Any], knowledge: Optional[List[Dict[str, Any]]] = None) -> str:
    """Second Dockerfile call: raw Dockerfile from the analysis and docker knowledge."""
    knowledge_context = "\n\n---\n\n".join(_format_docker_knowledge(k) for k in knowledge or [])

    return f"""You are a Docker expert. Generate a production-ready Dockerfile based on this analysis.

PROJECT ANALYSIS:
{json.dumps(analysis, indent=2, default=str)}

DOCKER BEST PRACTICES:
{knowledge_context or 'Use your own best judgement.'}

CRITICAL RULES:
1. Use multi-stage builds when appropriate
2. Follow security best practices (non-root user, minimal layers)
3. Optimize for caching (copy package files first, then source)
4. Include health checks
5. Use .dockerignore patterns in comments
6. Add clear comments explaining each section

Return ONLY the raw Dockerfile content, no markdown blocks."""


CODE_REVIEW_SYSTEM_PROMPT = """You are an expert code reviewer. Analyze the provided code for:
- Code quality and best practices
- Performance issues
- Security vulnerabilities
- Potential bugs
- Suggestions for improvement

Provide specific, actionable feedback."""


def build_code_review_request(message: str, current_code: Optional[str]) -> str:
    return f"Analyze this code:\n\n```\n{current_code or message}\n```"


_CHAT_PERSONALITY = """You are a helpful AI assistant for a web development platform. You can help users with:
- Coding questions and debugging
- Explaining concepts
- Project planning and architecture
- General web development advice

Be concise, helpful, and technical when appropriate."""


def build_chat_system_prompt(status: str, preferences: Optional[Dict[str, Any]] = None) -> str:
    """General-assistant system prompt with the live status block.

    Args:
        status: Rendered StatusSnapshot (see StatusSnapshot.describe)
        preferences: Caller's preferences row, if loaded
    """
    parts = [_CHAT_PERSONALITY, status]
    if preferences:
        shown = {k: v for k, v in preferences.items() if k not in ("id", "user_id", "created_at", "updated_at")}
        if shown:
            parts.append("USER PREFERENCES:\n" + "\n".join(f"- {k}: {v}" for k, v in shown.items()))
    return "\n\n".join(parts)
