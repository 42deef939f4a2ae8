"""Validators that reject low-value candidate questions.

Each validator is a pure function over the candidate question, the
questions already asked, and the confirmed traits. The rule tables are
plain data so they can be audited and tested on their own.
"""

import logging
import re
from typing import Iterable, Optional

from .fingerprint import are_semantically_related, normalize_question, topic_words
from .models import Trait, trait_value
from .realms import is_in_already_explored_realm

logger = logging.getLogger(__name__)


# Duplicate thresholds
MIN_OVERLAP = 2  # shared topic words that make two questions the same topic
MIN_SIMILARITY = 0.8  # overlap / max(fingerprint sizes)

# Questions that would ask about an already-confirmed trait key
TRAIT_KEY_TO_KEYWORDS: dict[str, frozenset[str]] = {
    "origin_medium": frozenset({
        "originate", "originated", "anime", "manga", "game", "videogame", "video", "movie",
        "film", "show", "television", "series", "comic", "comics", "book", "graphic", "novel",
    }),
    "fictional": frozenset({"fictional", "real", "reality", "imaginary", "fantasy", "exist"}),
    "gender": frozenset({"male", "female", "gender", "man", "woman", "boy", "girl"}),
    "species": frozenset({
        "human", "person", "people", "humanoid", "mortal", "alien", "robot", "animal", "creature",
    }),
    "has_powers": frozenset({
        "power", "powers", "ability", "abilities", "supernatural", "magic", "magical", "superpower",
    }),
    "alignment": frozenset({"hero", "heroic", "villain", "antagonist", "protagonist", "good", "evil", "bad"}),
    "morality": frozenset({"good", "bad", "evil", "moral", "immoral", "ethical"}),
    "age_group": frozenset({"child", "kid", "teenager", "teen", "adult", "young", "old", "age"}),
}

HUMAN_SPECIES = {"human", "person", "mortal"}
FALSE_VALUES = {"false", "no"}
REAL_VALUES = {"false", "no", "real"}

NON_HUMAN_TERMS = (
    "tail", "tails", "wing", "wings", "scale", "scales", "scaled",
    "pointed ears", "pointy ears", "elf ears", "antenna", "antennae",
    "tentacle", "tentacles", "claws", "fangs", "fur", "furry", "feathers",
    "beak", "snout", "muzzle", "horns", "hooves",
)

SPECIFIC_POWER_TERMS = (
    "fly", "flying", "flight", "teleport", "telepathy", "telekinesis",
    "super strength", "super speed", "invisibility", "invisible",
    "time control", "time travel", "shapeshif", "transform",
    "heal others", "healing powers", "mind reading", "read minds",
    "laser", "energy blast", "fire powers", "ice powers", "lightning",
    "x-ray vision", "enhanced senses", "regeneration", "immortal",
)

FANTASY_TERMS = (
    "magic", "magical", "spell", "wizard", "witch", "supernatural",
    "vampire", "werewolf", "zombie", "ghost", "demon", "angel",
    "dragon", "elf", "dwarf", "orc", "fairy", "mythical", "legendary creature",
)

# Phrasings that signal an overly narrow question
FORBIDDEN_PATTERNS: tuple[re.Pattern, ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"background in",
        r"background as",
        r"history of",
        r"history as",
        r"experience in",
        r"experience as",
        r"training in",
        r"training as",
        r"career in",
        r"career as",
        r"profession of",
        r"work as a [a-z]+\s[a-z]+",  # "work as a newspaper reporter"
    )
)


def topic_overlap(
    new_words: set[str],
    prior_words: set[str],
    allow_substring: bool = True,
) -> tuple[int, list[str]]:
    """Count new words related to some prior word (first match wins).

    Returns:
        (overlap count, matched pairs as "new~prior")
    """
    overlap = 0
    matched = []
    for new_word in sorted(new_words):
        for prior_word in sorted(prior_words):
            if are_semantically_related(new_word, prior_word, allow_substring):
                overlap += 1
                matched.append(f"{new_word}~{prior_word}")
                break
    return overlap, matched


def is_duplicate_topic(
    new_question: str,
    prior_questions: Iterable[str],
    allow_substring: bool = True,
) -> bool:
    """Check if a question repeats the topic of an already-asked question.

    A question is a duplicate when its normalized text equals a prior one,
    or when at least MIN_OVERLAP of its topic words relate to the prior
    question's, or when the overlap covers MIN_SIMILARITY of the larger
    fingerprint.

    Args:
        new_question: Candidate question
        prior_questions: Questions already asked
        allow_substring: Count words containing one another as related

    Returns:
        True if the candidate should not be asked
    """
    normalized_new = normalize_question(new_question)
    new_words = topic_words(new_question)

    for prior in prior_questions:
        if normalized_new == normalize_question(prior):
            logger.info("Exact duplicate: %r == %r", new_question, prior)
            return True

        if not new_words:
            continue

        prior_words = topic_words(prior)
        overlap, matched = topic_overlap(new_words, prior_words, allow_substring)
        ratio = overlap / max(len(new_words), len(prior_words))
        if overlap >= MIN_OVERLAP or ratio >= MIN_SIMILARITY:
            logger.info(
                "Semantic duplicate: %r vs %r (matched %s, ratio %.0f%%)",
                new_question, prior, matched, ratio * 100,
            )
            return True
    return False


def is_about_confirmed_trait(question: str, confirmed_keys: Iterable[str]) -> bool:
    """Check if a question asks about a trait key that is already confirmed."""
    words = topic_words(question)
    for key in confirmed_keys:
        keywords = TRAIT_KEY_TO_KEYWORDS.get(key)
        if not keywords:
            continue
        if words & keywords:
            logger.info("Question %r is about confirmed trait %s", question, key)
            return True
    return False


def is_logically_incompatible(question: str, traits: list[Trait]) -> bool:
    """Check if a question contradicts confirmed traits.

    Asking about wings for a confirmed human, flight for a character with
    no powers, or vampires for a real person wastes a turn.
    """
    lower = question.lower()
    species = trait_value(traits, "species")
    has_powers = trait_value(traits, "has_powers")
    fictional = trait_value(traits, "fictional")

    if species in HUMAN_SPECIES and any(term in lower for term in NON_HUMAN_TERMS):
        logger.info("Question %r asks about a non-human trait but character is human", question)
        return True

    if has_powers in FALSE_VALUES and any(term in lower for term in SPECIFIC_POWER_TERMS):
        logger.info("Question %r asks about powers but character has none", question)
        return True

    if fictional in REAL_VALUES and any(term in lower for term in FANTASY_TERMS):
        logger.info("Question %r asks about a fantasy element but character is real", question)
        return True

    return False


def has_forbidden_pattern(question: str) -> bool:
    """Check for phrasings that make a question too narrow to be useful."""
    return any(pattern.search(question) for pattern in FORBIDDEN_PATTERNS)


def validate_question(
    question: str,
    prior_questions: list[str],
    traits: list[Trait],
    allow_substring: bool = True,
) -> Optional[str]:
    """Run every validator on a candidate question.

    Args:
        question: Candidate question (possibly empty)
        prior_questions: Questions already asked
        traits: Confirmed traits
        allow_substring: Passed to the duplicate-topic check

    Returns:
        Name of the first failing check, or None if the question is usable
    """
    if not question or not question.strip():
        return "empty"
    if has_forbidden_pattern(question):
        return "forbidden pattern"
    if is_duplicate_topic(question, prior_questions, allow_substring):
        return "duplicate topic"
    if is_about_confirmed_trait(question, {t.key for t in traits}):
        return "redundant trait"
    if is_logically_incompatible(question, traits):
        return "logically incompatible"
    if is_in_already_explored_realm(question, prior_questions):
        return "already explored realm"
    return None
