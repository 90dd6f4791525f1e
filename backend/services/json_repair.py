"""
Shared JSON Repair Utility

Extracts, repairs, and parses JSON from generation-service replies.
Models wrap structured output in markdown fences, leave trailing commas,
or emit Python literals; this module handles the common failure modes in a
deterministic repair pipeline.

Used by: code-change analysis, Python project generation, Dockerfile analysis.
Callers treat a None result as a hard parse failure.
"""

import json
import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{[\s\S]*\})\s*```", re.IGNORECASE)
_RAW_OBJECT = re.compile(r"\{[\s\S]*\}")


def extract_json_from_response(text: str) -> Optional[str]:
    """
    Extract JSON string from an LLM response.

    Tries (in order):
    1. ```json (or bare ```) fenced code blocks containing an object
    2. Raw JSON object (outermost { ... })

    Args:
        text: Raw LLM response text

    Returns:
        Extracted JSON string, or None if no JSON found
    """
    if not text:
        return None

    # Fenced blocks first (most reliable)
    json_match = _FENCED_JSON.search(text)
    if json_match:
        return json_match.group(1).strip()

    json_match = _RAW_OBJECT.search(text)
    if json_match:
        return json_match.group(0).strip()

    return None


def repair_json(json_str: str) -> str:
    """
    Attempt to repair malformed JSON from LLM output.

    Handles common LLM JSON failure modes:
    1. Trailing prose after the closing brace
    2. Python literals (None, True, False instead of null, true, false)
    3. Single-quoted keys
    4. Trailing commas before } or ]
    5. Unclosed braces/brackets from truncation

    Args:
        json_str: Malformed JSON string

    Returns:
        Repaired JSON string (may still be invalid in edge cases)
    """
    original = json_str

    # Step 1: Truncate at last complete top-level brace
    brace_count = 0
    last_valid_pos = 0
    in_string = False
    escaped = False
    for i, c in enumerate(json_str):
        if in_string:
            if escaped:
                escaped = False
            elif c == "\\":
                escaped = True
            elif c == '"':
                in_string = False
            continue
        if c == '"':
            in_string = True
        elif c == "{":
            brace_count += 1
        elif c == "}":
            brace_count -= 1
            if brace_count == 0:
                last_valid_pos = i + 1
    if 0 < last_valid_pos < len(json_str):
        json_str = json_str[:last_valid_pos]
        logger.debug(f"Truncated trailing content after position {last_valid_pos}")

    # Step 2: Fix Python-style values
    json_str = re.sub(r"(?<=[:\[,\s])None\b", "null", json_str)
    json_str = re.sub(r"(?<=[:\[,\s])True\b", "true", json_str)
    json_str = re.sub(r"(?<=[:\[,\s])False\b", "false", json_str)

    # Step 3: Keys with single quotes
    json_str = re.sub(r"'(\w+)'\s*:", r'"\1":', json_str)

    # Step 4: Remove trailing commas
    json_str = re.sub(r",\s*}", "}", json_str)
    json_str = re.sub(r",\s*]", "]", json_str)

    # Step 5: Close unclosed braces/brackets if truncated
    open_braces = json_str.count("{") - json_str.count("}")
    open_brackets = json_str.count("[") - json_str.count("]")
    if open_braces > 0 or open_brackets > 0:
        json_str += "]" * max(open_brackets, 0) + "}" * max(open_braces, 0)
        logger.debug(f"Closed {open_braces} braces and {open_brackets} brackets")

    if json_str != original:
        logger.info("Applied JSON repairs")

    return json_str


def parse_json_response(text: str) -> Optional[Any]:
    """
    Full pipeline: extract JSON from LLM response, repair, and parse.

    Args:
        text: Raw LLM response text

    Returns:
        Parsed Python object (dict), or None if extraction/parsing fails
    """
    json_str = extract_json_from_response(text)
    if json_str is None:
        logger.warning("No JSON found in response")
        return None

    # Try parsing as-is first (fast path)
    try:
        return json.loads(json_str)
    except json.JSONDecodeError:
        pass

    # Apply repairs and retry
    repaired = repair_json(json_str)
    try:
        return json.loads(repaired)
    except json.JSONDecodeError as e:
        logger.error(f"JSON parse failed after all repairs: {e}")
        return None


def extract_code_block(text: str, languages: tuple = ()) -> str:
    """
    Return the body of the first fenced code block, or the text unchanged.

    Args:
        text: Raw LLM response text
        languages: Accepted fence language tags (empty tuple accepts any tag)

    Returns:
        Code inside the fence, stripped; original text stripped if no fence
    """
    if not text:
        return ""

    if languages:
        tags = "|".join(re.escape(lang) for lang in languages)
        pattern = re.compile(rf"```(?:{tags})?[ \t]*\n?([\s\S]*?)\s*```", re.IGNORECASE)
    else:
        pattern = re.compile(r"```[\w+-]*[ \t]*\n?([\s\S]*?)\s*```")

    match = pattern.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()
