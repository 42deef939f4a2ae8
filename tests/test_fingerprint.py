"""Tests for topic fingerprints."""

import pytest
from detective.fingerprint import (
    STOP_WORDS,
    SEMANTIC_GROUPS,
    are_semantically_related,
    normalize_question,
    same_semantic_group,
    topic_words,
)


class TestTopicWords:
    def test_strips_stop_words(self):
        assert topic_words("Is your character fictional?") == {"fictional"}

    def test_drops_short_tokens(self):
        # "tv" and "in" are too short to carry a topic
        assert topic_words("Is your character in a TV show?") == {"show"}

    def test_removes_punctuation(self):
        assert topic_words("Does your character have a sidekick, or companion?!") == {"sidekick", "companion"}

    def test_duplicates_collapse(self):
        assert topic_words("Hero hero HERO?") == {"hero"}

    def test_only_stop_words(self):
        assert topic_words("Is it your character?") == set()

    def test_stop_words_lowercase(self):
        assert all(w == w.lower() for w in STOP_WORDS)


class TestNormalizeQuestion:
    def test_case_and_punctuation(self):
        assert normalize_question("  Is your character REAL?? ") == "is your character real"

    def test_digits_removed(self):
        assert normalize_question("Turn 5?") == "turn"


class TestSemanticRelation:
    def test_identical(self):
        assert are_semantically_related("hero", "hero") == True

    def test_same_group(self):
        assert are_semantically_related("human", "person") == True
        assert are_semantically_related("movie", "film") == True

    def test_unrelated(self):
        assert are_semantically_related("sword", "cape") == False

    def test_different_values_not_grouped(self):
        assert same_semantic_group("hero", "villain") == False

    def test_plural_by_substring(self):
        assert are_semantically_related("power", "powers") == True

    def test_substring_over_match_preserved(self):
        # known false positive of the substring rule
        assert are_semantically_related("man", "woman") == True

    def test_substring_rule_can_be_disabled(self):
        assert are_semantically_related("man", "woman", allow_substring=False) == False
        assert are_semantically_related("human", "mortal", allow_substring=False) == True

    def test_groups_are_disjoint_for_opposites(self):
        for group in SEMANTIC_GROUPS:
            assert not {"hero", "villain"} <= group
            assert not {"male", "female"} <= group
