"""Trait extraction from answered questions.

The primary trait comes from the language model and is validated here.
A secondary trait is inferred deterministically for binary questions
(male/female, human/non-human, ...) without a second model call.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Optional

from .models import Trait, is_negative, is_positive
from .parsing import extract_json
from .prompts import TRAIT_EXTRACTOR_PROMPT, trait_query
from .providers import BaseProvider

logger = logging.getLogger(__name__)


BLOCKED_VALUES = {"unknown", "unclear", "n/a", "none", "not_applicable", "{}", ""}
NEGATED_PREFIXES = ("not_", "non_")

# Open-ended keys: "no" to one value says nothing about which value it is
SPECIFIC_CATEGORY_KEYS = {"origin_medium", "hair_color", "eye_color", "clothing", "accessories", "skin_color"}

DEFAULT_CONFIDENCE = 0.7
MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 0.99
INFERRED_CONFIDENCE = 0.85


def _clamp_confidence(raw) -> float:
    try:
        confidence = float(raw)
    except (TypeError, ValueError):
        confidence = 0.0
    if math.isnan(confidence) or confidence == 0.0:
        confidence = DEFAULT_CONFIDENCE
    return min(max(confidence, MIN_CONFIDENCE), MAX_CONFIDENCE)


def _as_text(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def validate_extracted_trait(question: str, answer: str, data: Optional[dict]) -> Optional[Trait]:
    """Turn a raw extraction result into a Trait, or reject it.

    Rules, in order:
    - missing key or value: rejected
    - placeholder values ("unknown", "none", ...) or negated values: rejected
    - specific-category keys answered negatively: rejected
    - "fictional" extracted from a question about being real: polarity is
      set from the answer, so "no" to "real?" gives fictional=true

    Args:
        question: The question that was answered
        answer: AnswerValue string
        data: Parsed model output

    Returns:
        Validated Trait with turn_added=0, or None
    """
    if not data or not data.get("key") or data.get("value") in (None, ""):
        logger.warning("Trait extraction missing key or value: %s", data)
        return None

    key = _as_text(data["key"]).strip()
    value = _as_text(data["value"]).strip()
    lowered = value.lower()

    if lowered in BLOCKED_VALUES or lowered.startswith(NEGATED_PREFIXES):
        logger.warning("Trait extraction rejected placeholder value %r", value)
        return None

    if key in SPECIFIC_CATEGORY_KEYS and is_negative(answer):
        logger.warning("Rejecting %s extracted from a negative answer to %r", key, question)
        return None

    if key == "fictional" and "real" in question.lower():
        corrected = "true" if is_negative(answer) else "false"
        if corrected != lowered:
            logger.info("Correcting fictional=%s to %s for %r answered %s", value, corrected, question, answer)
        value = corrected

    return Trait(key=key, value=value, confidence=_clamp_confidence(data.get("confidence")))


def extract_trait(
    question: str,
    answer: str,
    provider: BaseProvider,
    temperature: float = 0.1,
    max_tokens: int = 100,
) -> Optional[Trait]:
    """Ask the model for the trait implied by one answered question.

    "dont_know" answers carry no information and never reach the model.
    Transport failures propagate as ProviderError.
    """
    if answer == "dont_know":
        return None

    raw = provider.complete(
        TRAIT_EXTRACTOR_PROMPT,
        trait_query(question, answer),
        temperature=temperature,
        max_tokens=max_tokens,
    )
    logger.debug("Trait extraction raw output: %r", raw)

    data = extract_json(raw)
    if data is None:
        logger.warning("Trait extraction returned no JSON for %r", question)
        return None
    return validate_extracted_trait(question, answer, data)


@dataclass(frozen=True)
class BinaryPattern:
    """Keywords of a two-valued question and the values each answer implies.

    Keywords match whole words (plural "s" allowed), not any substring:
    "woman" does not trigger "man", and "superhero" does not trigger "hero".
    """
    keywords: tuple[str, ...]
    key: str
    positive_value: str
    negative_value: str

    def matches(self, question: str) -> bool:
        lower = question.lower()
        return any(re.search(rf"\b{re.escape(kw)}s?\b", lower) for kw in self.keywords)


BINARY_PATTERNS: tuple[BinaryPattern, ...] = (
    BinaryPattern(("human",), "species", "human", "non-human"),
    BinaryPattern(("hero", "heroic", "protagonist"), "alignment", "hero", "non-hero"),
    BinaryPattern(("villain", "antagonist", "evil"), "alignment", "villain", "non-villain"),
    BinaryPattern(("good", "good guy"), "morality", "good", "not-good"),
    BinaryPattern(("bad", "bad guy"), "morality", "bad", "not-bad"),
    BinaryPattern(("adult",), "age_group", "adult", "non-adult"),
    BinaryPattern(("child", "kid"), "age_group", "child", "not-child"),
    BinaryPattern(("teenager", "teen"), "age_group", "teenager", "not-teenager"),
    BinaryPattern(("male", "man", "boy"), "gender", "male", "female"),
    BinaryPattern(("female", "woman", "girl"), "gender", "female", "male"),
    BinaryPattern(("robot", "robotic", "android"), "species", "robot", "non-robot"),
    BinaryPattern(("alien", "extraterrestrial"), "species", "alien", "non-alien"),
    BinaryPattern(("animal", "creature"), "species", "animal", "non-animal"),
)


def is_negated_placeholder(value: str) -> bool:
    return value.startswith(("not-", "non-"))


def infer_secondary_trait(question: str, answer: str, primary: Optional[Trait]) -> Optional[Trait]:
    """Infer the complementary value of a binary question.

    The first matching pattern whose key the primary trait does not
    already cover decides the result. Patterns that would only yield a
    negated placeholder ("non-human") are skipped.

    Args:
        question: The question that was answered
        answer: AnswerValue string
        primary: Trait the model extracted for the same answer, if any

    Returns:
        Trait with fixed confidence, or None
    """
    positive = is_positive(answer)
    if not positive and not is_negative(answer):
        return None

    for pattern in BINARY_PATTERNS:
        if not pattern.matches(question):
            continue
        if primary is not None and primary.key == pattern.key:
            logger.debug("Primary trait already covers %s, skipping", pattern.key)
            continue

        value = pattern.positive_value if positive else pattern.negative_value
        if is_negated_placeholder(value):
            logger.debug("Skipping negated inference %s=%s", pattern.key, value)
            continue

        logger.info("Inferred %s=%s from %r answered %s", pattern.key, value, question, answer)
        return Trait(key=pattern.key, value=value, confidence=INFERRED_CONFIDENCE)

    return None
