import re
import json
from typing import Any, Callable, Dict, List, Optional
from research_assistant.errors import EmptyOutput

Extractor = Callable[[Dict[str, Any]], Optional[str]]

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?\s*```$", re.DOTALL)


def _from_output_field(envelope: Dict[str, Any]) -> Optional[str]:
    return envelope.get("output")


def _from_text_field(envelope: Dict[str, Any]) -> Optional[str]:
    return envelope.get("text")


def _from_candidate_parts(envelope: Dict[str, Any]) -> Optional[str]:
    candidates = envelope.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return None
    content = candidates[0].get("content")
    if not isinstance(content, dict):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list):
        return None
    # Grounded answers can be split across several text parts.
    texts = [part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)]
    return "".join(texts) if texts else None


# Tried in order; the first non-empty string wins.
EXTRACTORS: List[Extractor] = [
    _from_output_field,
    _from_text_field,
    _from_candidate_parts,
]


def extract_text(envelope: Any, extractors: Optional[List[Extractor]] = None) -> str:
    """
    Pulls the model's text out of a response envelope.

    Args:
        envelope: The decoded JSON body returned by the gateway.
        extractors: Extractor functions to try in order. Defaults to EXTRACTORS.

    Returns:
        str: The first non-empty match, stripped of surrounding whitespace.

    Raises:
        EmptyOutput: If no extractor finds usable text.
    """
    if isinstance(envelope, dict):
        for extractor in extractors or EXTRACTORS:
            value = extractor(envelope)
            if isinstance(value, str) and value.strip():
                return value.strip()
    raise EmptyOutput("The model returned an empty response.")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def parse_json_payload(text: str) -> Any:
    """
    Parses model output as JSON, tolerating a single surrounding markdown code fence.

    Raises:
        ValueError: If the text is not valid JSON. NaN and Infinity are rejected.
    """
    text = text.strip()
    match = _CODE_FENCE.match(text)
    if match:
        text = match.group(1).strip()
    return json.loads(text, parse_constant=_reject_constant)
