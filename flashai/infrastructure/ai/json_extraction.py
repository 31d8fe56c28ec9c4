"""Extraction of the JSON object from a model's text reply.

Models wrap JSON in markdown fences, cut it off at the token limit, or add
chatter around it. `extract_json_payload` tries, in order: the cleaned
reply as-is, the reply trimmed back to its last closing brace, and the
outermost `{...}` span.
"""

import json
import logging
import re
from typing import Any, Dict

from flashai.domain.errors import MalformedResponseError

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")
_OBJECT_SPAN = re.compile(r"\{[\s\S]*\}")

def strip_code_fences(content: str) -> str:
    cleaned = content.strip()
    cleaned = _FENCE_OPEN.sub("", cleaned)
    cleaned = _FENCE_CLOSE.sub("", cleaned)
    return cleaned.strip()

def _loads_object(text: str) -> Dict[str, Any]:
    value = json.loads(text)
    if not isinstance(value, dict):
        raise MalformedResponseError(f"Expected a JSON object, got {type(value).__name__}")
    return value

def extract_json_payload(content: str) -> Dict[str, Any]:
    """Decodes the JSON object contained in `content`.

    Raises:
        MalformedResponseError: If no JSON object can be recovered.
    """
    if not content or not content.strip():
        raise MalformedResponseError("Empty response from AI provider")

    cleaned = strip_code_fences(content)
    candidates = [cleaned]

    if not cleaned.endswith('}'):
        last_brace = cleaned.rfind('}')
        if last_brace > 0:
            logger.warning("Response appears to be truncated. Trimming to the last closing brace.")
            candidates.append(cleaned[:last_brace + 1])

    match = _OBJECT_SPAN.search(content)
    if match:
        candidates.append(match.group(0))

    for candidate in candidates:
        try:
            return _loads_object(candidate)
        except (json.JSONDecodeError, MalformedResponseError):
            continue

    logger.error(f"Failed to parse JSON response ({len(content)} chars)")
    logger.debug(f"Content that failed to parse: {content}")
    raise MalformedResponseError("Invalid JSON response from AI provider")
