"""Question-consistency engine for an Akinator-style guessing game."""

from .models import (
    AnswerValue,
    CharacterFacts,
    DetectiveResult,
    Guess,
    GuessAttempt,
    SessionLearning,
    Trait,
    Turn,
    merge_traits,
)
from .config import Config, load_config
from .errors import DetectiveError, ProviderError, SessionStateError
from .fingerprint import are_semantically_related, topic_words
from .redundancy import (
    has_forbidden_pattern,
    is_about_confirmed_trait,
    is_duplicate_topic,
    is_logically_incompatible,
    validate_question,
)
from .realms import is_in_already_explored_realm
from .traits import extract_trait, infer_secondary_trait
from .fallback import pick_fallback
from .guesses import GuessValidator
from .engine import DetectiveEngine
from .session import GameSession, Phase, create_session

__all__ = [
    "AnswerValue",
    "CharacterFacts",
    "DetectiveResult",
    "Guess",
    "GuessAttempt",
    "SessionLearning",
    "Trait",
    "Turn",
    "merge_traits",
    "Config",
    "load_config",
    "DetectiveError",
    "ProviderError",
    "SessionStateError",
    "are_semantically_related",
    "topic_words",
    "has_forbidden_pattern",
    "is_about_confirmed_trait",
    "is_duplicate_topic",
    "is_logically_incompatible",
    "validate_question",
    "is_in_already_explored_realm",
    "extract_trait",
    "infer_secondary_trait",
    "pick_fallback",
    "GuessValidator",
    "DetectiveEngine",
    "GameSession",
    "Phase",
    "create_session",
]
