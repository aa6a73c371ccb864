"""Best-effort recovery of a JSON object from free-form LLM output."""
import json
import logging
import re
from typing import Any, Dict, Iterator, Optional

logger = logging.getLogger(__name__)

THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL)
FENCED_BLOCKS = [
    re.compile(r"```json\s*(.*?)\s*```", re.DOTALL),
    re.compile(r"```\s*(.*?)\s*```", re.DOTALL),
]
OUTERMOST_BRACES = re.compile(r"\{.*\}", re.DOTALL)
ANY_BRACES = re.compile(r"\{.*?\}", re.DOTALL)


def strip_thinking(text: Optional[str]) -> str:
    """Removes <think>...</think> reasoning sections some models emit."""
    if not text:
        return ""
    return THINK_BLOCK.sub("", text).strip()


def _candidates(cleaned: str) -> Iterator[str]:
    yield cleaned
    for pattern in FENCED_BLOCKS:
        match = pattern.search(cleaned)
        if match:
            yield match.group(1)
    match = OUTERMOST_BRACES.search(cleaned)
    if match:
        yield match.group(0)
    yield from ANY_BRACES.findall(cleaned)


def extract_json(content: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Tries, in order: the whole text, a ```json fenced block, any fenced block,
    the outermost {...} span, then every non-nested {...} span.
    Returns the first candidate that decodes to a JSON object, or None.
    """
    cleaned = strip_thinking(content)
    for candidate in _candidates(cleaned):
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed
    logger.warning(f"No JSON object found in LLM output: {cleaned[:120]!r}")
    return None
