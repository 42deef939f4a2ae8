"""Tolerant parsing of JSON objects out of raw model output."""

import json
import re
from typing import Optional


_CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)
_decoder = json.JSONDecoder()


def extract_json(raw: str) -> Optional[dict]:
    """Find the first well-formed JSON object in a model response.

    Models wrap JSON in code fences or add commentary before and after
    it. Fences are removed, then decoding is attempted at each "{" until
    one parses as an object.

    Args:
        raw: Raw model output

    Returns:
        Parsed object, or None if no object could be decoded
    """
    if not raw:
        return None
    cleaned = _CODE_FENCE.sub("", raw)

    start = cleaned.find("{")
    while start != -1:
        try:
            obj, _ = _decoder.raw_decode(cleaned, start)
        except json.JSONDecodeError:
            start = cleaned.find("{", start + 1)
            continue
        if isinstance(obj, dict):
            return obj
        start = cleaned.find("{", start + 1)
    return None


def parse_question_proposal(raw: str) -> tuple[str, list]:
    """Split a question-proposal response into question text and raw guesses.

    Returns:
        (question or "", top_guesses list or [])
    """
    data = extract_json(raw) or {}
    question = data.get("question")
    question = str(question).strip() if question else ""
    guesses = data.get("top_guesses")
    if not isinstance(guesses, list):
        guesses = []
    return question, guesses
