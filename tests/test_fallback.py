"""Tests for fallback question selection."""

from detective.fallback import (
    EXTENDED_FALLBACKS,
    FALLBACK_QUESTIONS,
    extended_fallback,
    pick_fallback,
)
from detective.models import Trait
from detective.redundancy import is_duplicate_topic


def make_trait(key: str, value: str) -> Trait:
    """Helper to create confirmed traits."""
    return Trait(key=key, value=value, confidence=0.95, turn_added=1)


class TestFallbackPools:
    def test_pool_sizes(self):
        assert len(FALLBACK_QUESTIONS) == 80
        assert len(EXTENDED_FALLBACKS) == 30

    def test_no_repeated_entries(self):
        assert len(set(FALLBACK_QUESTIONS)) == len(FALLBACK_QUESTIONS)
        assert len(set(EXTENDED_FALLBACKS)) == len(EXTENDED_FALLBACKS)

    def test_broad_questions_first(self):
        assert FALLBACK_QUESTIONS[:3] == (
            "Is your character fictional?",
            "Is your character male?",
            "Is your character human?",
        )


class TestExtendedFallback:
    def test_indexed_by_turn(self):
        assert extended_fallback(3) == f"{EXTENDED_FALLBACKS[3]} (T3)"

    def test_wraps_around(self):
        assert extended_fallback(30) == f"{EXTENDED_FALLBACKS[0]} (T30)"
        assert extended_fallback(81) == f"{EXTENDED_FALLBACKS[21]} (T81)"

    def test_never_a_literal_repeat(self):
        assert extended_fallback(5) != extended_fallback(35)


class TestPickFallback:
    def test_first_question(self):
        assert pick_fallback([], set(), []) == "Is your character fictional?"

    def test_skips_asked(self):
        priors = ["Is your character fictional?"]
        assert pick_fallback(priors, set(), []) == "Is your character male?"

    def test_skips_asked_ignoring_case(self):
        priors = ["is your character FICTIONAL"]
        assert pick_fallback(priors, set(), []) == "Is your character male?"

    def test_skips_semantic_duplicate(self):
        # "imaginary" is a synonym of "fictional"
        priors = ["Is your character imaginary?"]
        assert pick_fallback(priors, set(), []) == "Is your character male?"

    def test_skips_confirmed_keys(self):
        priors = ["Is your character fictional?"]
        traits = [make_trait("gender", "female")]
        assert pick_fallback(priors, {"gender"}, traits) == "Is your character human?"

    def test_skips_several_confirmed_keys(self):
        priors = ["Is your character fictional?"]
        traits = [make_trait("gender", "female"), make_trait("species", "human")]
        result = pick_fallback(priors, {"gender", "species"}, traits)
        assert result == "Did your character originate in an anime or manga series?"

    def test_skips_incompatible(self):
        priors = list(FALLBACK_QUESTIONS[:36])
        assert pick_fallback(priors, set(), []) == "Does your character have wings?"

        traits = [make_trait("species", "human")]
        result = pick_fallback(priors, set(), traits)
        assert result not in (
            "Does your character have wings?",
            "Does your character have a tail?",
            "Does your character have pointed ears?",
        )

    def test_result_is_never_duplicate(self):
        priors = list(FALLBACK_QUESTIONS[:10])
        result = pick_fallback(priors, set(), [])
        assert is_duplicate_topic(result, priors) == False

    def test_substring_rule_passed_through(self):
        # "male" is contained in "female"
        priors = ["Is your character fictional?", "Is your character a female?"]
        assert pick_fallback(priors, set(), []) == "Is your character human?"
        assert pick_fallback(priors, set(), [], allow_substring=False) == "Is your character male?"

    def test_exhausted_uses_extended_pool(self):
        priors = list(FALLBACK_QUESTIONS)
        result = pick_fallback(priors, set(), [])
        # turn number is one past the questions already asked
        assert result == f"{EXTENDED_FALLBACKS[81 % 30]} (T81)"
