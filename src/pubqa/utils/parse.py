import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)


class ExtractionStatus(str, Enum):
    OK = "ok"
    NO_JSON_FOUND = "no_json_found"
    INVALID_JSON = "invalid_json"


@dataclass(frozen=True)
class JSONExtraction:
    """Outcome of pulling a JSON object out of free-form LLM output."""
    status: ExtractionStatus
    data: Optional[Any] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ExtractionStatus.OK


def find_first_json_object(text: str) -> Optional[str]:
    """
    Return the first balanced ``{...}`` block in text.

    Braces inside JSON string literals are ignored. Returns None when no
    opening brace is found or the block is never closed (truncated output).

    Args:
        text: Raw response from LLM
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for idx in range(start, len(text)):
        char = text[idx]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start:idx + 1]
    return None


def extract_json_object(text: Optional[str]) -> JSONExtraction:
    """
    Parse the first JSON object found anywhere in an LLM response.

    Surrounding commentary and markdown code fences are tolerated. Never raises.

    Args:
        text: Response from LLM
    """
    if not text or not text.strip():
        logger.warning("Empty response from LLM")
        return JSONExtraction(ExtractionStatus.NO_JSON_FOUND, error="Empty response")

    block = find_first_json_object(text)
    if block is None:
        logger.warning(f"No JSON object found in response: {text[:300]}")
        return JSONExtraction(ExtractionStatus.NO_JSON_FOUND, error="No balanced JSON object")

    try:
        parsed = json.loads(block)
    except json.JSONDecodeError as e:
        logger.warning(f"JSON parse failed: {e}\nCleaned text: {block[:300]}")
        return JSONExtraction(ExtractionStatus.INVALID_JSON, error=f"JSON decode error: {e}")

    logger.debug(f"Successfully parsed JSON: type={type(parsed)}")
    return JSONExtraction(ExtractionStatus.OK, data=parsed)
