"""Per-turn detective pipeline.

One turn: extract a trait from the last answer, infer a secondary trait,
merge, ask the model for the next question, validate it (falling back to
a pre-authored question when it fails), and filter the proposed guesses.
"""

import logging
import re
from typing import Optional

from .config import ProviderConfig
from .fallback import pick_fallback
from .guesses import GuessValidator
from .models import DetectiveResult, SessionLearning, Trait, Turn, merge_traits
from .parsing import parse_question_proposal
from .prompts import DETECTIVE_SYSTEM_PROMPT, build_question_context
from .providers import BaseProvider
from .redundancy import validate_question
from .traits import extract_trait, infer_secondary_trait

logger = logging.getLogger(__name__)

_OR_CLAUSE = re.compile(r"\s+or\s+[^?]*", re.IGNORECASE)


def clean_question(question: str) -> str:
    """Cut an "A or B" question down to its first alternative."""
    question = question.strip()
    if " or " in question.lower():
        question = _OR_CLAUSE.sub("", question, count=1).rstrip()
        if not question.endswith("?"):
            question += "?"
    return question


class DetectiveEngine:
    """Runs detective turns against a language model.

    The engine holds no game state besides the guess validator's lookup
    cache; traits, turns and rejected guesses are passed in on every call.
    """

    def __init__(
        self,
        provider: BaseProvider,
        validator: Optional[GuessValidator] = None,
        config: Optional[ProviderConfig] = None,
        allow_substring: bool = True,
    ):
        self.provider = provider
        self.validator = validator or GuessValidator()
        self.config = config or ProviderConfig()
        # False: only synonym groups relate words in the duplicate check
        self.allow_substring = allow_substring

    def reset(self) -> None:
        """Drop session-scoped caches."""
        self.validator.clear_cache()

    def new_traits_for(self, last_turn: Optional[Turn], traits: list[Trait], turn_number: int) -> list[Trait]:
        """Traits confirmed by the last answer, stamped with turn_number."""
        if last_turn is None:
            return []

        primary = extract_trait(
            last_turn.question,
            last_turn.answer,
            self.provider,
            temperature=self.config.trait_temperature,
            max_tokens=self.config.trait_max_tokens,
        )
        secondary = infer_secondary_trait(last_turn.question, last_turn.answer, primary)

        new_traits = []
        if primary is not None:
            new_traits.append(primary.at_turn(turn_number))
        if secondary is not None:
            known_keys = {t.key for t in traits} | {t.key for t in new_traits}
            if secondary.key not in known_keys:
                new_traits.append(secondary.at_turn(turn_number))
                logger.info("Added inferred trait %s=%s", secondary.key, secondary.value)
        return new_traits

    def ask_next_question(
        self,
        traits: list[Trait],
        turns: list[Turn],
        rejected_guesses: list[str],
        learning: Optional[SessionLearning] = None,
    ) -> DetectiveResult:
        """Ask the model for the next question and validate its answer.

        Args:
            traits: Confirmed traits, including this turn's
            turns: Every completed turn
            rejected_guesses: Names the player rejected
            learning: Session notes added to the context

        Returns:
            DetectiveResult without new traits
        """
        prior_questions = [t.question for t in turns]
        context = build_question_context(traits, turns, rejected_guesses, learning)
        logger.debug(
            "Sending context: %d traits, %d questions, %d rejected guesses",
            len(traits), len(prior_questions), len(rejected_guesses),
        )

        raw = self.provider.complete(
            DETECTIVE_SYSTEM_PROMPT,
            context,
            temperature=self.config.question_temperature,
            max_tokens=self.config.question_max_tokens,
        )
        logger.debug("Question proposal raw output: %r", raw)

        question, raw_guesses = parse_question_proposal(raw)
        if not question:
            logger.warning("No question in model output, using fallback")
        question = clean_question(question) if question else ""

        reason = validate_question(question, prior_questions, traits, self.allow_substring)
        if reason is not None:
            fallback = pick_fallback(
                prior_questions, {t.key for t in traits}, traits, self.allow_substring,
            )
            logger.warning("Rejected %s question %r, using fallback %r", reason, question, fallback)
            question = fallback

        top_guesses = self.validator.filter_guesses(raw_guesses, traits, rejected_guesses)
        return DetectiveResult(question=question, top_guesses=top_guesses, fallback_reason=reason)

    def ask_detective(
        self,
        traits: list[Trait],
        turns: list[Turn],
        turn_number: int,
        rejected_guesses: Optional[list[str]] = None,
        learning: Optional[SessionLearning] = None,
    ) -> DetectiveResult:
        """Run one full detective turn.

        Trait extraction and the question proposal run one after the
        other: the proposal's context needs the traits from the last
        answer. A transport failure in either call raises ProviderError
        and nothing is returned.

        Args:
            traits: Traits confirmed before this turn
            turns: Every completed turn, the last one just answered
            turn_number: Turn number to stamp on new traits
            rejected_guesses: Names the player rejected
            learning: Session notes added to the context

        Returns:
            DetectiveResult with the next question, this turn's new traits
            and the filtered guesses
        """
        rejected_guesses = rejected_guesses or []
        last_turn = turns[-1] if turns else None

        new_traits = self.new_traits_for(last_turn, traits, turn_number)
        updated = merge_traits(traits, new_traits)

        result = self.ask_next_question(updated, turns, rejected_guesses, learning)
        result.new_traits = new_traits
        logger.info("Question: %s | guesses: %s", result.question, [g.name for g in result.top_guesses])
        return result
