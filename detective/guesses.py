"""Guess compatibility filter.

Candidate characters proposed by the model are checked against the
confirmed traits. Facts come from a small built-in table or, for names
not in the table, from a lookup collaborator whose answers are cached for
the session. Names nobody knows anything about are let through.
"""

import logging
import math
import re
import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import requests

from .models import CharacterFacts, Guess, Trait, trait_value

logger = logging.getLogger(__name__)


def _facts(powers, gender, species, fictional, alignment=None) -> CharacterFacts:
    return CharacterFacts(powers=powers, gender=gender, species=species, fictional=fictional, alignment=alignment)


KNOWN_CHARACTERS: dict[str, CharacterFacts] = {
    # fictional characters
    "superman": _facts(True, "male", "alien", True, "hero"),
    "batman": _facts(False, "male", "human", True, "hero"),
    "wonder woman": _facts(True, "female", "demigod", True, "hero"),
    "iron man": _facts(True, "male", "human", True, "hero"),
    "captain america": _facts(True, "male", "human", True, "hero"),
    "spider-man": _facts(True, "male", "human", True, "hero"),
    "spiderman": _facts(True, "male", "human", True, "hero"),
    "hulk": _facts(True, "male", "human", True, "hero"),
    "thor": _facts(True, "male", "god", True, "hero"),
    "black widow": _facts(False, "female", "human", True, "hero"),
    "hawkeye": _facts(False, "male", "human", True, "hero"),
    "joker": _facts(False, "male", "human", True, "villain"),
    "lex luthor": _facts(False, "male", "human", True, "villain"),
    "darth vader": _facts(True, "male", "human", True, "villain"),
    "thanos": _facts(True, "male", "alien", True, "villain"),
    "harry potter": _facts(True, "male", "human", True, "hero"),
    "hermione granger": _facts(True, "female", "human", True, "hero"),
    "voldemort": _facts(True, "male", "human", True, "villain"),
    "luke skywalker": _facts(True, "male", "human", True, "hero"),
    "leia organa": _facts(True, "female", "human", True, "hero"),
    "sherlock holmes": _facts(False, "male", "human", True),
    "frodo baggins": _facts(False, "male", "hobbit", True, "hero"),
    "gandalf": _facts(True, "male", "wizard", True),
    "mickey mouse": _facts(False, "male", "mouse", True),
    "donald duck": _facts(False, "male", "duck", True),
    # real people
    "abraham lincoln": _facts(False, "male", "human", False),
    "george washington": _facts(False, "male", "human", False),
    "john f kennedy": _facts(False, "male", "human", False),
    "jfk": _facts(False, "male", "human", False),
    "winston churchill": _facts(False, "male", "human", False),
    "albert einstein": _facts(False, "male", "human", False),
    "martin luther king": _facts(False, "male", "human", False),
    "nelson mandela": _facts(False, "male", "human", False),
    "mahatma gandhi": _facts(False, "male", "human", False),
    "leonardo da vinci": _facts(False, "male", "human", False),
    "william shakespeare": _facts(False, "male", "human", False),
    "cleopatra": _facts(False, "female", "human", False),
    "queen elizabeth": _facts(False, "female", "human", False),
    "marie curie": _facts(False, "female", "human", False),
    "nikola tesla": _facts(False, "male", "human", False),
    "elon musk": _facts(False, "male", "human", False),
    "steve jobs": _facts(False, "male", "human", False),
    "bill gates": _facts(False, "male", "human", False),
    "oprah winfrey": _facts(False, "female", "human", False),
    "michael jordan": _facts(False, "male", "human", False),
    "muhammad ali": _facts(False, "male", "human", False),
    "elvis presley": _facts(False, "male", "human", False),
    "michael jackson": _facts(False, "male", "human", False),
    "beyonce": _facts(False, "female", "human", False),
    "taylor swift": _facts(False, "female", "human", False),
}

REAL_PERSON_INDICATORS = (
    "born", "died", "death", "president", "politician", "actor", "actress",
    "musician", "singer", "artist", "scientist", "inventor", "author", "writer",
    "director", "athlete", "sports", "ceo", "founder", "businessman", "businesswoman",
    "activist", "leader", "prime minister", "king", "queen", "emperor", "general",
    "served as", "elected", "biography", "historical figure", "nobel prize",
    "olympics", "world war", "assassination", "married to",
)

FICTIONAL_INDICATORS = (
    "fictional character", "character from", "protagonist", "antagonist",
    "appears in", "created by", "portrayed by", "voiced by", "anime", "manga",
    "comic book", "video game", "novel character", "movie character",
    "superhero", "supervillain",
)

POWER_TERMS = ("power", "super", "magic", "ability", "abilities", "wizard", "mutant")

_MALE = re.compile(r"\b(he|his|him|male|man)\b")
_FEMALE = re.compile(r"\b(she|her|hers|female|woman)\b")

# Checked in order, first hit wins
SPECIES_CUES: tuple[tuple[str, re.Pattern], ...] = (
    ("alien", re.compile(r"\b(alien|extraterrestrial)\b")),
    ("robot", re.compile(r"\b(robot|android|cyborg)\b")),
    ("god", re.compile(r"\b(god|goddess|deity)\b")),
    ("animal", re.compile(r"\b(animal|mouse|duck|creature)\b")),
)

_HERO = re.compile(r"hero|protagonist|\bsaves\b")
_VILLAIN = re.compile(r"villain|antagonist|\bevil\b")

HUMAN_COMPATIBLE_SPECIES = {"human", "demigod"}
UNKNOWN_GENDERS = {"", "unknown"}


def classify_character_text(text: str) -> CharacterFacts:
    """Heuristically classify a character from a descriptive text.

    Real people are recognized by biographical vocabulary, fictional
    characters by media vocabulary; ties default to fictional. Real people
    are always human and never have powers.

    Args:
        text: Heading and abstract describing the name

    Returns:
        CharacterFacts with gender "unknown" when no pronoun settles it
    """
    text = text.lower()

    real_count = sum(1 for indicator in REAL_PERSON_INDICATORS if indicator in text)
    fictional_count = sum(1 for indicator in FICTIONAL_INDICATORS if indicator in text)
    fictional = not real_count > fictional_count

    male_hits = len(_MALE.findall(text))
    female_hits = len(_FEMALE.findall(text))
    if male_hits > female_hits:
        gender = "male"
    elif female_hits > male_hits:
        gender = "female"
    else:
        gender = "unknown"

    powers = fictional and any(term in text for term in POWER_TERMS)

    species = "human"
    if fictional:
        for name, pattern in SPECIES_CUES:
            if pattern.search(text):
                species = name
                break

    alignment = None
    if _HERO.search(text):
        alignment = "hero"
    elif _VILLAIN.search(text):
        alignment = "villain"

    return CharacterFacts(powers=powers, gender=gender, species=species, fictional=fictional, alignment=alignment)


class CharacterLookup(ABC):
    """External source of facts about a character name."""

    @abstractmethod
    def lookup(self, name: str) -> Optional[CharacterFacts]:
        """Return facts for the name, or None when nothing is known or the lookup failed."""
        pass


class DuckDuckGoLookup(CharacterLookup):
    """Classify names from the DuckDuckGo instant-answer abstract."""

    def __init__(
        self,
        endpoint: str = "https://api.duckduckgo.com/",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self._session = session or requests.Session()

    def lookup(self, name: str) -> Optional[CharacterFacts]:
        try:
            response = self._session.get(
                self.endpoint,
                params={"q": name, "format": "json", "no_html": 1},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Lookup failed for %r: %s", name, exc)
            return None

        if not isinstance(data, dict):
            logger.warning("Unexpected lookup response for %r: %s", name, type(data).__name__)
            return None

        abstract = data.get("Abstract") or data.get("AbstractText") or ""
        heading = data.get("Heading") or ""
        if not abstract and not heading:
            logger.warning("No information found for %r", name)
            return None

        facts = classify_character_text(f"{heading} {abstract}")
        logger.info("Looked up %r: %s", name, facts)
        return facts


def incompatibility(facts: CharacterFacts, traits: list[Trait]) -> Optional[str]:
    """Describe the first confirmed trait the facts contradict, if any."""
    has_powers = trait_value(traits, "has_powers")
    gender = trait_value(traits, "gender")
    species = trait_value(traits, "species")
    alignment = trait_value(traits, "alignment")
    fictional = trait_value(traits, "fictional")

    if has_powers in ("false", "no") and facts.powers:
        return "has powers but character has none"
    if has_powers in ("true", "yes") and not facts.powers:
        return "has no powers but character has powers"

    known_gender = facts.gender.lower() not in UNKNOWN_GENDERS
    if known_gender and gender in ("male", "man", "boy") and facts.gender != "male":
        return "wrong gender (expected male)"
    if known_gender and gender in ("female", "woman", "girl") and facts.gender != "female":
        return "wrong gender (expected female)"

    if species in ("human", "person") and facts.species not in HUMAN_COMPATIBLE_SPECIES:
        return f"not human (species: {facts.species})"

    if alignment == "hero" and facts.alignment == "villain":
        return "villain but character is a hero"
    if alignment == "villain" and facts.alignment == "hero":
        return "hero but character is a villain"

    if fictional in ("true", "yes") and not facts.fictional:
        return "real person but character is fictional"
    if fictional in ("false", "no", "real") and facts.fictional:
        return "fictional but character is real"

    return None


def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


class GuessValidator:
    """Session-scoped guess filter with a lookup cache.

    The cache lives as long as the validator; create one per game or call
    clear_cache() on reset.
    """

    def __init__(self, lookup: Optional[CharacterLookup] = None, max_workers: int = 4):
        self.lookup = lookup
        self.max_workers = max(1, max_workers)
        self._cache: dict[str, Optional[CharacterFacts]] = {}
        self._lock = threading.Lock()

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def facts_for(self, name: str) -> Optional[CharacterFacts]:
        """Known facts for a name from the table, the cache, or the lookup."""
        key = name.strip().lower()
        if key in KNOWN_CHARACTERS:
            return KNOWN_CHARACTERS[key]

        with self._lock:
            if key in self._cache:
                logger.debug("Using cached lookup for %r", name)
                return self._cache[key]

        if self.lookup is None:
            return None

        try:
            facts = self.lookup.lookup(name)
        except Exception as exc:
            # a failed lookup lets the guess through
            logger.warning("Lookup collaborator failed for %r: %s", name, exc)
            facts = None
        with self._lock:
            self._cache[key] = facts
        return facts

    def is_compatible(self, name: str, traits: list[Trait]) -> bool:
        """Check a candidate against the confirmed traits.

        Unknown names are allowed: the model may know characters that
        neither the table nor the lookup does.
        """
        facts = self.facts_for(name)
        if facts is None:
            logger.info("Character %r unknown, allowing guess", name)
            return True

        reason = incompatibility(facts, traits)
        if reason is not None:
            logger.info("Filtering guess %r: %s", name, reason)
            return False
        return True

    def filter_guesses(
        self,
        raw_guesses: list,
        traits: list[Trait],
        rejected_guesses: list[str],
    ) -> list[Guess]:
        """Validate the model's proposed guesses.

        Malformed entries and previously rejected names are dropped, the
        rest are validated concurrently. Order is preserved.

        Args:
            raw_guesses: top_guesses entries from the model ({"name", "confidence"})
            traits: Confirmed traits
            rejected_guesses: Names the player already rejected

        Returns:
            Compatible guesses with confidence clamped to [0.01, 0.99]
        """
        rejected = {r.lower() for r in rejected_guesses}
        candidates = [
            g for g in raw_guesses
            if isinstance(g, dict) and g.get("name") and _is_number(g.get("confidence"))
            and str(g["name"]).lower() not in rejected
        ]
        if not candidates:
            return []

        names = [str(g["name"]) for g in candidates]
        workers = min(self.max_workers, len(names))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            verdicts = list(executor.map(lambda n: self.is_compatible(n, traits), names))

        return [
            Guess(name=name, confidence=min(max(float(g["confidence"]), 0.01), 0.99))
            for name, g, ok in zip(names, candidates, verdicts)
            if ok
        ]
