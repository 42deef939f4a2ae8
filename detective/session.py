"""Game session state machine.

Phases:
    idle -> processing -> waiting_for_answer -> processing -> ...
    processing -> guessing -> revealed -> hero_render
    guessing -> processing (guess rejected)

A Turn is numbered when its question is shown, not when it is answered:
set_question() advances the counter and submit_answer() records the Turn
with the current value.
"""

import logging
import random
from enum import Enum
from typing import Optional

from .config import Config, GameConfig
from .engine import DetectiveEngine
from .errors import DetectiveError, SessionStateError
from .guesses import DuckDuckGoLookup, GuessValidator
from .models import (
    ANSWER_VALUES,
    DetectiveResult,
    Guess,
    GuessAttempt,
    SessionLearning,
    Trait,
    Turn,
    merge_traits,
)
from .providers import provider_from_config

logger = logging.getLogger(__name__)

# Seed handed to the portrait renderer; the engine never reads it
MAX_SEED = 2147483647


class Phase(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    WAITING_FOR_ANSWER = "waiting_for_answer"
    GUESSING = "guessing"
    REVEALED = "revealed"
    HERO_RENDER = "hero_render"


class GameSession:
    """All state of one game, mutated turn by turn.

    Owns the session learning notes and, through the engine, the guess
    lookup cache; both are discarded by start_game() and reset().
    """

    def __init__(
        self,
        engine: DetectiveEngine,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.engine = engine
        self.config = config or GameConfig()
        self.rng = rng or random.Random()
        self.learning = SessionLearning()
        self._clear_state()
        self.seed = self.rng.randrange(MAX_SEED)

    def _clear_state(self) -> None:
        self.phase = Phase.IDLE
        self.turn = 0
        self.traits: list[Trait] = []
        self.turns: list[Turn] = []
        self._processed_turns = 0
        self.current_question: Optional[str] = None
        self.top_guesses: list[Guess] = []
        self.rejected_guesses: list[str] = []
        self.guess_attempts: list[GuessAttempt] = []
        self.current_image_url: Optional[str] = None
        self.final_guess: Optional[str] = None
        self.error: Optional[str] = None
        self.is_processing = False
        self.learning.reset()
        self.engine.reset()

    def _require(self, *phases: Phase) -> None:
        if self.phase not in phases:
            expected = ", ".join(p.value for p in phases)
            raise SessionStateError(f"Invalid transition from {self.phase.value} (expected {expected})")

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start_game(self) -> None:
        """Reset every piece of game state and start processing turn one."""
        self._clear_state()
        self.phase = Phase.PROCESSING
        self.seed = self.rng.randrange(MAX_SEED)
        self.is_processing = True
        logger.info("New game started (seed %d)", self.seed)

    def set_question(self, question: str, guesses: list[Guess], new_traits: list[Trait]) -> None:
        """Show a new question; the turn counter advances here."""
        self._require(Phase.PROCESSING)
        self.phase = Phase.WAITING_FOR_ANSWER
        self.turn += 1
        self.current_question = question
        self.top_guesses = list(guesses)
        self.traits = merge_traits(self.traits, new_traits)
        self.is_processing = False

    def submit_answer(self, answer: str) -> Turn:
        """Close out the current question as a Turn numbered with the current turn."""
        self._require(Phase.WAITING_FOR_ANSWER)
        if answer not in ANSWER_VALUES:
            raise ValueError(f"Invalid answer: {answer}. Expected one of {list(ANSWER_VALUES)}")

        record = Turn(
            turn_number=self.turn,
            question=self.current_question or "",
            answer=answer,
            top_guesses=tuple(self.top_guesses),
        )
        self.turns.append(record)
        if answer == "dont_know":
            self.learning.record_ambiguous_question(record.question, record.turn_number)

        self.phase = Phase.PROCESSING
        self.is_processing = True
        return record

    def make_guess(self, name: str) -> None:
        """Present a final character guess instead of a question."""
        self._require(Phase.PROCESSING, Phase.WAITING_FOR_ANSWER)
        self.phase = Phase.GUESSING
        self.final_guess = name
        self.is_processing = False

    def _last_turn_number(self) -> int:
        return self.turns[-1].turn_number if self.turns else self.turn

    def confirm_guess(self, correct: bool) -> GuessAttempt:
        """Record the player's verdict on the final guess."""
        self._require(Phase.GUESSING)
        attempt = GuessAttempt(
            guess=self.final_guess or "",
            correct=correct,
            turn_number=self._last_turn_number(),
        )
        self.guess_attempts.append(attempt)
        self.is_processing = True

        if correct:
            self.phase = Phase.REVEALED
            logger.info("Guess %r confirmed at turn %d", attempt.guess, attempt.turn_number)
            return attempt

        self.phase = Phase.PROCESSING
        if self.final_guess:
            self.rejected_guesses.append(self.final_guess)
            self.learning.record_rejected_guess(self.final_guess, self.traits, attempt.turn_number)
            logger.info("Guess %r rejected at turn %d", attempt.guess, attempt.turn_number)
        return attempt

    def hero_render_complete(self, image_url: str) -> None:
        self.phase = Phase.HERO_RENDER
        self.current_image_url = image_url
        self.is_processing = False

    def update_image(self, image_url: str) -> None:
        self.current_image_url = image_url

    def set_error(self, message: str) -> None:
        self.error = message
        self.is_processing = False

    def clear_error(self) -> None:
        self.error = None

    def reset(self) -> None:
        """Back to idle; discards traits, turns, guesses, learning and caches."""
        self._clear_state()

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    def should_guess(self, guesses: list[Guess]) -> Optional[Guess]:
        """Best guess if it is time to commit to one."""
        if not guesses:
            return None
        best = max(guesses, key=lambda g: g.confidence)
        if self.turn >= self.config.max_turns:
            return best
        if self.turn >= self.config.min_turns_before_guess and best.confidence >= self.config.guess_threshold:
            return best
        return None

    def advance(self) -> DetectiveResult:
        """Run one detective turn and apply its result.

        On a provider failure the error is recorded, nothing else changes
        (the turn does not advance), and the exception is re-raised.

        Returns:
            The engine's result for this turn
        """
        self._require(Phase.PROCESSING)
        try:
            if len(self.turns) > self._processed_turns or not self.turns:
                result = self.engine.ask_detective(
                    self.traits,
                    self.turns,
                    self.turn,
                    rejected_guesses=self.rejected_guesses,
                    learning=self.learning,
                )
            else:
                # after a rejected guess the last answer has already been mined for traits
                result = self.engine.ask_next_question(
                    self.traits, self.turns, self.rejected_guesses, self.learning,
                )
        except DetectiveError as exc:
            logger.error("Detective turn failed: %s", exc)
            self.set_error(str(exc))
            raise

        self._processed_turns = len(self.turns)
        self.clear_error()
        best = self.should_guess(result.top_guesses)
        if best is not None:
            self.traits = merge_traits(self.traits, result.new_traits)
            self.top_guesses = list(result.top_guesses)
            self.make_guess(best.name)
        else:
            self.set_question(result.question, result.top_guesses, result.new_traits)
        return result


def create_session(config: Optional[Config] = None) -> GameSession:
    """Build a session wired to the configured provider and lookup."""
    config = config or Config()
    lookup = None
    if config.lookup.enabled:
        lookup = DuckDuckGoLookup(endpoint=config.lookup.endpoint, timeout=config.lookup.timeout)
    engine = DetectiveEngine(
        provider_from_config(config.provider),
        validator=GuessValidator(lookup, max_workers=config.lookup.max_workers),
        config=config.provider,
    )
    return GameSession(engine, config=config.game)
