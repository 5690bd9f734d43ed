"""
Recovery of a single JSON object from free-form model text.
Handles markdown code fences and conversational text around the object.
"""
import json
import re
from typing import Any

from core.exceptions import ExtractionError
from core.logger import setup_logger

logger = setup_logger(__name__)

CODE_FENCE_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """
    Return the content of the first fenced block, or the text unchanged.

    Args:
        text: Raw model text

    Returns:
        Fence content or original text
    """
    fenced = CODE_FENCE_PATTERN.search(text)
    return fenced.group(1) if fenced else text


def extract_first_json_object(text: str) -> str:
    """
    Slice out the first brace-balanced object starting at the first '{'.

    Args:
        text: Text that may contain a JSON object surrounded by prose

    Returns:
        Substring from the first '{' to its matching '}'

    Raises:
        ExtractionError: If no '{' exists or the braces never balance
    """
    start = text.find("{")
    if start == -1:
        raise ExtractionError(
            "No '{' found in model output",
            details={"text": text[:500]}
        )

    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        if depth == 0:
            return text[start:i + 1]

    raise ExtractionError(
        "Unterminated JSON object in model output",
        details={"text": text[:500]}
    )


def parse_model_json(text: str) -> Any:
    """
    Parse model text into a JSON value.

    Tries the (fence-stripped) text directly first, then falls back to the
    first brace-balanced object found inside it.

    Args:
        text: Assembled model output

    Returns:
        Parsed JSON value

    Raises:
        ExtractionError: If no JSON object can be recovered
    """
    stripped = strip_code_fences(text).strip()

    try:
        return json.loads(stripped)
    except json.JSONDecodeError:
        logger.debug("Model output is not bare JSON, scanning for first object")

    candidate = extract_first_json_object(stripped)
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ExtractionError(
            f"Model output contains malformed JSON: {e}",
            details={"candidate": candidate[:500]}
        )
