"""Deterministic fallback questions.

Used whenever the model's proposed question fails validation. The primary
list is ordered broad to narrow: fictional/real, gender, species, origin
medium, powers, appearance, personality, background, abilities and
relationships.
"""

import logging
from typing import Iterable

from .fingerprint import normalize_question
from .models import Trait
from .redundancy import is_about_confirmed_trait, is_duplicate_topic, is_logically_incompatible

logger = logging.getLogger(__name__)


FALLBACK_QUESTIONS: tuple[str, ...] = (
    "Is your character fictional?",
    "Is your character male?",
    "Is your character human?",
    "Did your character originate in an anime or manga series?",
    "Did your character originate in a video game?",
    "Did your character originate in a comic book?",
    "Did your character originate in a movie?",
    "Did your character originate in a TV show?",
    "Does your character have supernatural powers or abilities?",
    "Does your character have a distinctive hair color (not black or brown)?",
    "Does your character typically wear armor or a costume?",
    "Is your character known for being a villain or antagonist?",
    "Is your character part of a team or group?",
    "Does your character use a weapon?",
    "Is your character associated with a specific color or symbol?",
    "Does your character have any distinctive accessories?",
    "Does your character have facial hair?",
    "Is your character known for a specific catchphrase or saying?",
    "Does your character have a distinctive eye color?",
    "Is your character associated with a specific location or place?",
    "Does your character have a sidekick or companion?",
    "Is your character bald or have a shaved head?",
    "Does your character wear glasses or eyewear?",
    "Is your character known for a specific fighting style?",
    "Does your character have tattoos or body markings?",
    "Is your character royalty or nobility?",
    "Does your character have a specific occupation or job?",
    "Is your character known for being intelligent or clever?",
    "Does your character have a specific weakness or vulnerability?",
    "Is your character associated with a specific element (fire, water, etc.)?",
    # physical traits
    "Does your character have long hair?",
    "Does your character have short hair?",
    "Does your character wear a hat or headgear?",
    "Does your character have scars or injuries?",
    "Does your character have a muscular build?",
    "Does your character wear a cape or cloak?",
    "Does your character have wings?",
    "Does your character have a tail?",
    "Does your character have pointed ears?",
    "Does your character have glowing eyes?",
    # personality and behavior
    "Is your character funny or comedic?",
    "Is your character serious or stern?",
    "Is your character brave or courageous?",
    "Is your character mysterious or secretive?",
    "Is your character friendly or outgoing?",
    "Is your character aggressive or violent?",
    "Is your character wise or knowledgeable?",
    "Is your character naive or innocent?",
    "Is your character arrogant or prideful?",
    "Is your character humble or modest?",
    # background and setting
    "Is your character from a fantasy setting?",
    "Is your character from a sci-fi setting?",
    "Is your character from ancient times?",
    "Is your character from modern times?",
    "Is your character from the future?",
    "Does your character come from wealth or poverty?",
    "Is your character famous or well-known in their world?",
    "Is your character an orphan?",
    "Does your character have a tragic backstory?",
    "Does your character have family members who are important to the story?",
    # abilities and skills
    "Is your character physically strong?",
    "Is your character fast or agile?",
    "Can your character fly?",
    "Can your character teleport or move instantly?",
    "Can your character read minds or use telepathy?",
    "Can your character control time?",
    "Can your character become invisible?",
    "Is your character immortal or very long-lived?",
    "Can your character heal others?",
    "Does your character have enhanced senses?",
    # relationships and roles
    "Does your character have a romantic partner?",
    "Does your character have a mentor or teacher?",
    "Does your character have a rival or nemesis?",
    "Is your character a leader?",
    "Is your character a loner?",
    "Does your character work with law enforcement?",
    "Is your character a student?",
    "Does your character have children?",
    "Does your character have a pet or animal companion?",
    "Is your character part of a family dynasty?",
)

# Cycled by turn number once every primary question is used up
EXTENDED_FALLBACKS: tuple[str, ...] = (
    "Does your character use technology or gadgets?",
    "Is your character a scientist or inventor?",
    "Does your character have a secret identity?",
    "Is your character wealthy or rich?",
    "Does your character live in a city?",
    "Is your character from space or another planet?",
    "Does your character wear a mask?",
    "Is your character athletic or sporty?",
    "Does your character have a specific accent or way of speaking?",
    "Is your character religious or spiritual?",
    "Does your character have a disability?",
    "Is your character a parent?",
    "Does your character smoke or drink?",
    "Is your character a criminal?",
    "Does your character have military training?",
    "Is your character a doctor or medic?",
    "Does your character have artistic talents?",
    "Is your character a musician?",
    "Does your character have magical abilities?",
    "Is your character connected to nature or animals?",
    "Does your character have a dual personality?",
    "Is your character from nobility or high society?",
    "Does your character have cybernetic enhancements?",
    "Is your character undead or a ghost?",
    "Does your character have a tragic love story?",
    "Is your character seeking revenge?",
    "Does your character have amnesia or memory loss?",
    "Is your character a shapeshifter?",
    "Does your character have a cursed or blessed item?",
    "Is your character prophesied or destined for something?",
)


def extended_fallback(turn_number: int) -> str:
    """Extended-pool question for a turn, tagged so it is never a literal repeat."""
    question = EXTENDED_FALLBACKS[turn_number % len(EXTENDED_FALLBACKS)]
    return f"{question} (T{turn_number})"


def pick_fallback(
    prior_questions: list[str],
    confirmed_keys: Iterable[str],
    traits: list[Trait],
    allow_substring: bool = True,
) -> str:
    """Pick the first fallback question that passes every validator.

    Args:
        prior_questions: Questions already asked
        confirmed_keys: Keys of confirmed traits
        traits: Confirmed traits
        allow_substring: Passed to the duplicate-topic check

    Returns:
        A primary fallback question, or an extended one tagged with the
        turn number when the primary list is exhausted
    """
    confirmed_keys = set(confirmed_keys)
    asked = {normalize_question(q) for q in prior_questions}

    for i, question in enumerate(FALLBACK_QUESTIONS, start=1):
        if normalize_question(question) in asked:
            logger.debug("Skipping fallback #%d (exact match): %s", i, question)
            continue
        if is_duplicate_topic(question, prior_questions, allow_substring):
            reason = "duplicate"
        elif is_about_confirmed_trait(question, confirmed_keys):
            reason = "redundant"
        elif is_logically_incompatible(question, traits):
            reason = "incompatible"
        else:
            logger.info("Selected fallback #%d/%d: %s", i, len(FALLBACK_QUESTIONS), question)
            return question
        logger.debug("Skipping fallback #%d (%s): %s", i, reason, question)

    turn_number = len(prior_questions) + 1
    fallback = extended_fallback(turn_number)
    logger.warning(
        "All %d fallbacks exhausted, using extended fallback #%d/%d: %s",
        len(FALLBACK_QUESTIONS), turn_number % len(EXTENDED_FALLBACKS) + 1,
        len(EXTENDED_FALLBACKS), fallback,
    )
    return fallback
