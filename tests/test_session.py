"""Tests for the game session state machine."""

import random

import pytest
from detective.config import Config, GameConfig, LookupConfig
from detective.engine import DetectiveEngine
from detective.errors import ProviderError, SessionStateError
from detective.models import Guess
from detective.providers import LemonadeProvider
from detective.session import MAX_SEED, GameSession, Phase, create_session


def make_session(provider, **game_kwargs) -> GameSession:
    """Helper to create a session around a scripted provider."""
    return GameSession(DetectiveEngine(provider), config=GameConfig(**game_kwargs), rng=random.Random(7))


def make_proposal(question, guesses=None) -> dict:
    """Helper to create a question-proposal response."""
    return {"question": question, "top_guesses": guesses or []}


class ListBodySession:
    """HTTP session whose every reply decodes to a JSON list."""

    class Response:
        def raise_for_status(self):
            pass

        def json(self):
            return []

    def post(self, url, json=None, timeout=None):
        return self.Response()


class TestTransitions:
    def test_initial_state(self, make_provider):
        session = make_session(make_provider([]))
        assert session.phase == Phase.IDLE
        assert session.turn == 0
        assert session.traits == []
        assert session.turns == []

    def test_start_game(self, make_provider):
        session = make_session(make_provider([]))
        session.start_game()
        assert session.phase == Phase.PROCESSING
        assert session.is_processing == True

    def test_portrait_seed_drawn_per_game(self, make_provider):
        session = make_session(make_provider([]))
        session.start_game()
        first = session.seed
        session.start_game()

        assert 0 <= session.seed < MAX_SEED
        assert session.seed != first

        replay = make_session(make_provider([]))
        replay.start_game()
        assert replay.seed == first

    def test_set_question_advances_turn(self, make_provider):
        session = make_session(make_provider([]))
        session.start_game()
        session.set_question("Is your character fictional?", [Guess("Batman", 0.2)], [])

        assert session.phase == Phase.WAITING_FOR_ANSWER
        assert session.turn == 1
        assert session.current_question == "Is your character fictional?"
        assert session.top_guesses == [Guess("Batman", 0.2)]

    def test_submit_answer_records_current_turn(self, make_provider):
        session = make_session(make_provider([]))
        session.start_game()
        session.set_question("Is your character fictional?", [], [])
        record = session.submit_answer("yes")

        assert record.turn_number == 1
        assert record.question == "Is your character fictional?"
        assert session.turns == [record]
        assert session.phase == Phase.PROCESSING

    def test_invalid_answer(self, make_provider):
        session = make_session(make_provider([]))
        session.start_game()
        session.set_question("Is your character fictional?", [], [])
        with pytest.raises(ValueError):
            session.submit_answer("maybe")
        assert session.turns == []

    def test_invalid_transition(self, make_provider):
        session = make_session(make_provider([]))
        with pytest.raises(SessionStateError):
            session.set_question("Is your character fictional?", [], [])
        with pytest.raises(SessionStateError):
            session.submit_answer("yes")
        with pytest.raises(SessionStateError):
            session.confirm_guess(True)

    def test_session_state_error_is_value_error(self, make_provider):
        session = make_session(make_provider([]))
        with pytest.raises(ValueError):
            session.advance()

    def test_dont_know_recorded_as_ambiguous(self, make_provider):
        session = make_session(make_provider([]))
        session.start_game()
        session.set_question("Is your character stoic?", [], [])
        session.submit_answer("dont_know")

        assert len(session.learning.ambiguous_questions) == 1
        assert session.learning.ambiguous_questions[0].question == "Is your character stoic?"
        assert session.learning.ambiguous_questions[0].turn == 1

    def test_guess_confirmed(self, make_provider):
        session = make_session(make_provider([]))
        session.start_game()
        session.make_guess("Batman")
        attempt = session.confirm_guess(True)

        assert session.phase == Phase.REVEALED
        assert attempt.correct == True
        assert session.rejected_guesses == []

    def test_hero_render(self, make_provider):
        session = make_session(make_provider([]))
        session.start_game()
        session.make_guess("Batman")
        session.confirm_guess(True)
        session.hero_render_complete("https://img.test/batman.png")

        assert session.phase == Phase.HERO_RENDER
        assert session.current_image_url == "https://img.test/batman.png"
        assert session.is_processing == False

    def test_reset(self, make_provider):
        session = make_session(make_provider([]))
        session.start_game()
        session.set_question("Is your character stoic?", [], [])
        session.submit_answer("dont_know")
        session.make_guess("Batman")
        session.confirm_guess(False)
        session.set_error("boom")
        session.reset()

        assert session.phase == Phase.IDLE
        assert session.turn == 0
        assert session.turns == []
        assert session.rejected_guesses == []
        assert session.guess_attempts == []
        assert session.error is None
        assert session.learning.is_empty == True

    def test_start_game_discards_previous_game(self, make_provider):
        session = make_session(make_provider([]))
        session.start_game()
        session.set_question("Is your character fictional?", [], [])
        session.submit_answer("yes")
        session.start_game()

        assert session.turn == 0
        assert session.turns == []


class TestShouldGuess:
    def test_no_guesses(self, make_provider):
        session = make_session(make_provider([]))
        assert session.should_guess([]) is None

    def test_too_early(self, make_provider):
        session = make_session(make_provider([]), min_turns_before_guess=5)
        session.turn = 2
        assert session.should_guess([Guess("Batman", 0.95)]) is None

    def test_confident(self, make_provider):
        session = make_session(make_provider([]), min_turns_before_guess=5, guess_threshold=0.85)
        session.turn = 5
        best = session.should_guess([Guess("Joker", 0.4), Guess("Batman", 0.9)])
        assert best == Guess("Batman", 0.9)

    def test_not_confident(self, make_provider):
        session = make_session(make_provider([]), min_turns_before_guess=5, guess_threshold=0.85)
        session.turn = 6
        assert session.should_guess([Guess("Batman", 0.6)]) is None

    def test_max_turns(self, make_provider):
        session = make_session(make_provider([]), max_turns=10)
        session.turn = 10
        assert session.should_guess([Guess("Batman", 0.1)]) == Guess("Batman", 0.1)


class TestAdvance:
    def test_first_turn(self, make_provider):
        session = make_session(make_provider([make_proposal("Is your character fictional?")]))
        session.start_game()
        session.advance()

        assert session.phase == Phase.WAITING_FOR_ANSWER
        assert session.turn == 1
        assert session.current_question == "Is your character fictional?"

    def test_turn_numbers_match_positions(self, make_provider):
        provider = make_provider([
            make_proposal("Is your character fictional?"),
            {"key": "fictional", "value": "true", "confidence": 0.9},
            make_proposal("Does your character wear a cape?"),
            "no trait here",
            make_proposal("Does your character use a sword?"),
            "no trait here",
            make_proposal("Is your character a leader?"),
        ])
        session = make_session(provider)
        session.start_game()
        for answer in ("yes", "no", "yes"):
            session.advance()
            session.submit_answer(answer)
        session.advance()

        assert [t.turn_number for t in session.turns] == [1, 2, 3]
        assert session.turn == 4

    def test_traits_stamped_with_turn(self, make_provider):
        provider = make_provider([
            make_proposal("Is your character fictional?"),
            {"key": "fictional", "value": "true", "confidence": 0.9},
            make_proposal("Does your character wear a cape?"),
        ])
        session = make_session(provider)
        session.start_game()
        session.advance()
        session.submit_answer("yes")
        session.advance()

        assert len(session.traits) == 1
        assert session.traits[0].key == "fictional"
        assert session.traits[0].turn_added == 1

    def test_provider_error_leaves_state(self, make_provider):
        provider = make_provider([
            make_proposal("Is your character fictional?"),
            ProviderError("fake", "connection refused"),
            {"key": "fictional", "value": "true", "confidence": 0.9},
            make_proposal("Does your character wear a cape?"),
        ])
        session = make_session(provider)
        session.start_game()
        session.advance()
        session.submit_answer("yes")

        with pytest.raises(ProviderError):
            session.advance()
        assert session.turn == 1
        assert session.phase == Phase.PROCESSING
        assert session.traits == []
        assert "connection refused" in session.error

        session.advance()
        assert session.turn == 2
        assert session.error is None

    def test_malformed_provider_body_leaves_state(self):
        provider = LemonadeProvider(model_name="qwen", session=ListBodySession())
        session = GameSession(DetectiveEngine(provider), rng=random.Random(7))
        session.start_game()

        with pytest.raises(ProviderError):
            session.advance()
        assert session.error is not None
        assert session.turn == 0
        assert session.phase == Phase.PROCESSING
        assert session.is_processing == False

    def test_guess_then_rejection(self, make_provider):
        batman = [{"name": "Batman", "confidence": 0.9}]
        provider = make_provider([
            make_proposal("Is your character fictional?"),
            {"key": "fictional", "value": "true", "confidence": 0.9},
            make_proposal("Does your character wear a cape?", batman),
            make_proposal("Does your character use a sword?", batman),
        ])
        session = make_session(provider, min_turns_before_guess=1, guess_threshold=0.8)
        session.start_game()
        session.advance()
        session.submit_answer("yes")
        session.advance()

        assert session.phase == Phase.GUESSING
        assert session.final_guess == "Batman"
        assert session.turn == 1
        assert session.traits[0].key == "fictional"

        attempt = session.confirm_guess(False)
        assert attempt.turn_number == 1
        assert session.rejected_guesses == ["Batman"]
        assert session.learning.rejected_characters[0].name == "Batman"

        # the last answer was already mined for traits: only a proposal call
        session.advance()
        assert len(provider.calls) == 4
        assert session.phase == Phase.WAITING_FOR_ANSWER
        assert session.turn == 2
        assert session.current_question == "Does your character use a sword?"
        assert session.top_guesses == []

    def test_guess_at_max_turns(self, make_provider):
        provider = make_provider([
            make_proposal("Is your character fictional?"),
            "no trait here",
            make_proposal("Does your character wear a cape?", [{"name": "Joker", "confidence": 0.2}]),
        ])
        session = make_session(provider, max_turns=1)
        session.start_game()
        session.advance()
        session.submit_answer("yes")
        session.advance()

        assert session.phase == Phase.GUESSING
        assert session.final_guess == "Joker"

    def test_requires_processing(self, make_provider):
        session = make_session(make_provider([]))
        with pytest.raises(SessionStateError):
            session.advance()


class TestCreateSession:
    def test_wires_configured_collaborators(self):
        config = Config(lookup=LookupConfig(enabled=False), game=GameConfig(max_turns=12))
        session = create_session(config)

        assert isinstance(session.engine.provider, LemonadeProvider)
        assert session.engine.validator.lookup is None
        assert session.config.max_turns == 12
        assert session.phase == Phase.IDLE

    def test_lookup_enabled(self):
        session = create_session(Config())
        assert session.engine.validator.lookup is not None
