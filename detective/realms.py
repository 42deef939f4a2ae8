"""Hierarchical topic realms.

Questions are grouped into realms (hair, clothing, weapons, ...). Once a
question in a realm has been asked, only strictly more specific follow-ups
in that realm are allowed: "blonde hair?" may not be followed by
"distinctive hair?".
"""

import logging
import re
from typing import Iterable

from .fingerprint import topic_words

logger = logging.getLogger(__name__)


def _keywords(*words: str) -> frozenset[str]:
    # fingerprints drop punctuation, so "black-haired" is matched as "blackhaired"
    return frozenset(re.sub(r"[^a-z0-9]", "", word) for word in words)


# Keywords are matched against fingerprints, so stop words ("wear", "from") never match
TOPIC_REALMS: dict[str, frozenset[str]] = {
    "hair": _keywords(
        "hair", "hairstyle", "blonde", "brunette", "redhead", "black-haired", "bald", "shaved",
        "long-haired", "short-haired", "curly", "straight",
    ),
    "clothing": _keywords(
        "clothing", "clothes", "costume", "armor", "uniform", "suit", "dress", "cape",
        "cloak", "hat", "mask", "outfit",
    ),
    "accessories": _keywords(
        "accessories", "accessory", "glasses", "eyewear", "jewelry", "necklace", "ring",
        "bracelet", "watch", "belt", "gloves",
    ),
    "eyes": _keywords("eye", "eyes", "eye-color", "blue-eyed", "brown-eyed", "green-eyed", "glowing-eyes"),
    "build": _keywords(
        "build", "body", "physique", "muscular", "thin", "fat", "tall", "short", "athletic",
        "strong", "weak",
    ),
    "face": _keywords("face", "facial", "beard", "mustache", "goatee", "scar", "tattoo", "marking"),
    "powers": _keywords(
        "power", "powers", "ability", "abilities", "superpower", "supernatural", "magic",
        "strength", "flight", "speed", "teleport",
    ),
    "weapons": _keywords(
        "weapon", "weapons", "sword", "gun", "knife", "blade", "bow", "staff", "armed",
        "armed-combat",
    ),
    "relationships": _keywords(
        "relationship", "partner", "spouse", "friend", "ally", "sidekick", "companion", "mentor",
        "student",
    ),
    "location": _keywords("location", "place", "city", "country", "planet", "world", "live", "reside"),
    "occupation": _keywords("occupation", "job", "work", "career", "profession", "employed", "worker"),
    "personality": _keywords(
        "personality", "character-trait", "brave", "cowardly", "smart", "intelligent", "funny",
        "serious", "kind", "cruel", "arrogant", "humble",
    ),
}

# Specificity scale
GENERIC = 0
BROAD = 1
MODERATE = 2
VERY_SPECIFIC = 3

# Per-realm rules, most specific first; a realm with rules scores GENERIC
# when no phrase matches.
SPECIFICITY_RULES: dict[str, tuple[tuple[int, tuple[str, ...]], ...]] = {
    "hair": (
        (VERY_SPECIFIC, ("blonde", "brunette", "redhead")),
        (MODERATE, ("long", "short", "curly")),
        (BROAD, ("distinctive", "hair color")),
    ),
    "clothing": (
        (VERY_SPECIFIC, ("red cape", "blue suit")),
        (MODERATE, ("cape", "armor", "costume")),
        (BROAD, ("distinctive", "special clothing")),
    ),
    "accessories": (
        (VERY_SPECIFIC, ("round glasses", "gold ring")),
        (MODERATE, ("glasses", "jewelry")),
        (BROAD, ("distinctive", "accessories")),
    ),
    "eyes": (
        (VERY_SPECIFIC, ("blue eye", "green eye", "brown eye", "red eye", "blue-eyed", "green-eyed", "brown-eyed")),
        (MODERATE, ("glowing", "one eye", "eye patch")),
        (BROAD, ("distinctive", "eye color")),
    ),
    "weapons": (
        (VERY_SPECIFIC, ("sword", "gun", "knife", "blade", "bow", "staff")),
        (BROAD, ("weapon", "armed")),
    ),
    "powers": (
        (VERY_SPECIFIC, ("flight", "teleport", "super strength", "super speed", "telepathy", "invisib")),
        (MODERATE, ("magic", "strength", "speed")),
        (BROAD, ("power", "abilit", "supernatural")),
    ),
}

BROAD_MARKERS = ("distinctive", "specific", "notable", "known for")


def get_specificity(question: str, realm: str) -> int:
    """Estimate how specific a question is within a realm.

    Args:
        question: Question text
        realm: Realm name from TOPIC_REALMS

    Returns:
        0 (generic) to 3 (very specific)
    """
    lower = question.lower()

    rules = SPECIFICITY_RULES.get(realm)
    if rules is not None:
        for score, phrases in rules:
            if any(phrase in lower for phrase in phrases):
                return score
        return GENERIC

    if any(marker in lower for marker in BROAD_MARKERS):
        return BROAD
    return MODERATE


def question_realms(question: str) -> list[str]:
    """Realms whose keywords appear in the question's fingerprint."""
    words = topic_words(question)
    return [realm for realm, keywords in TOPIC_REALMS.items() if words & keywords]


def is_in_already_explored_realm(new_question: str, prior_questions: Iterable[str]) -> bool:
    """Check if a question is no more specific than an earlier one in the same realm.

    Args:
        new_question: Candidate question
        prior_questions: Questions already asked

    Returns:
        True if the candidate only repeats or broadens an explored realm
    """
    new_realms = question_realms(new_question)
    if not new_realms:
        return False

    for prior in prior_questions:
        prior_words = topic_words(prior)
        for realm in new_realms:
            if not prior_words & TOPIC_REALMS[realm]:
                continue
            new_specificity = get_specificity(new_question, realm)
            prior_specificity = get_specificity(prior, realm)
            if new_specificity <= prior_specificity:
                logger.info(
                    "Question %r is in already-explored realm %r (previous: %r)",
                    new_question, realm, prior,
                )
                return True
    return False
