"""Tests for data models."""

import pytest
from detective.models import (
    ANSWER_VALUES,
    DetectiveResult,
    SessionLearning,
    Trait,
    is_negative,
    is_positive,
    merge_traits,
    trait_value,
)


def make_trait(key: str, value: str, turn: int = 1) -> Trait:
    """Helper to create traits."""
    return Trait(key=key, value=value, confidence=0.9, turn_added=turn)


class TestAnswers:
    def test_values(self):
        assert ANSWER_VALUES == ("yes", "no", "probably", "probably_not", "dont_know")

    def test_polarity(self):
        assert is_positive("yes") == True
        assert is_positive("probably") == True
        assert is_negative("no") == True
        assert is_negative("probably_not") == True
        assert is_positive("dont_know") == False
        assert is_negative("dont_know") == False


class TestTrait:
    def test_at_turn(self):
        trait = Trait(key="gender", value="male", confidence=0.9)
        stamped = trait.at_turn(3)
        assert stamped.turn_added == 3
        assert trait.turn_added == 0


class TestMergeTraits:
    def test_adds_new_key(self):
        merged = merge_traits([make_trait("gender", "male")], [make_trait("species", "human")])
        assert [(t.key, t.value) for t in merged] == [("gender", "male"), ("species", "human")]

    def test_single_valued_replaced_in_place(self):
        existing = [make_trait("gender", "male"), make_trait("species", "human")]
        merged = merge_traits(existing, [make_trait("gender", "female", turn=4)])

        assert [(t.key, t.value) for t in merged] == [("gender", "female"), ("species", "human")]
        assert merged[0].turn_added == 4

    def test_unlisted_key_replaced(self):
        merged = merge_traits([make_trait("hair_color", "blonde")], [make_trait("hair_color", "red")])
        assert [(t.key, t.value) for t in merged] == [("hair_color", "red")]

    def test_multi_valued_accumulates(self):
        existing = [make_trait("category", "superhero")]
        merged = merge_traits(existing, [make_trait("category", "detective"), make_trait("category", "superhero")])
        assert [t.value for t in merged] == ["superhero", "detective"]

    def test_inputs_not_modified(self):
        existing = [make_trait("gender", "male")]
        merge_traits(existing, [make_trait("gender", "female")])
        assert existing[0].value == "male"

    def test_one_trait_per_single_key(self):
        merged = merge_traits([], [make_trait("species", "alien"), make_trait("species", "robot")])
        assert len([t for t in merged if t.key == "species"]) == 1


class TestTraitValue:
    def test_lowercased(self):
        assert trait_value([make_trait("species", "Human")], "species") == "human"

    def test_missing(self):
        assert trait_value([], "species") is None


class TestSessionLearning:
    def test_records_and_resets(self):
        learning = SessionLearning()
        assert learning.is_empty == True

        traits = [make_trait("gender", "male")]
        learning.record_rejected_guess("Batman", traits, 6)
        learning.record_ambiguous_question("Is your character stoic?", 4)
        traits.append(make_trait("species", "human"))

        assert learning.rejected_characters[0].turn_rejected == 6
        assert len(learning.rejected_characters[0].traits_when_guessed) == 1
        assert learning.ambiguous_questions[0].turn == 4

        learning.reset()
        assert learning.is_empty == True


class TestDetectiveResult:
    def test_used_fallback(self):
        assert DetectiveResult(question="Q?").used_fallback == False
        assert DetectiveResult(question="Q?", fallback_reason="duplicate topic").used_fallback == True

    def test_defaults_not_shared(self):
        first = DetectiveResult(question="Q?")
        first.new_traits.append(make_trait("gender", "male"))
        assert DetectiveResult(question="Q?").new_traits == []
