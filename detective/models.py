"""Data models for detective game sessions."""

from dataclasses import dataclass, field, replace
from typing import Literal, Optional


AnswerValue = Literal["yes", "no", "probably", "probably_not", "dont_know"]

ANSWER_VALUES: tuple[str, ...] = ("yes", "no", "probably", "probably_not", "dont_know")
POSITIVE_ANSWERS = {"yes", "probably"}
NEGATIVE_ANSWERS = {"no", "probably_not"}

# Keys the trait extractor is allowed to produce
TRAIT_KEYS: tuple[str, ...] = (
    "gender",
    "species",
    "fictional",
    "origin_medium",
    "has_powers",
    "alignment",
    "morality",
    "age_group",
    "hair_color",
    "hair_style",
    "clothing",
    "accessories",
    "facial_hair",
    "eye_color",
    "body_type",
    "skin_color",
    "category",
)

SINGLE_VALUED_KEYS = frozenset({
    "gender",
    "species",
    "fictional",
    "origin_medium",
    "has_powers",
    "alignment",
    "morality",
    "age_group",
})

# Distinct values accumulate; everything else is replaced by key
MULTI_VALUED_KEYS = frozenset({"category"})


def is_positive(answer: str) -> bool:
    return answer in POSITIVE_ANSWERS


def is_negative(answer: str) -> bool:
    return answer in NEGATIVE_ANSWERS


@dataclass
class Trait:
    """A single confirmed fact about the secret character."""
    key: str
    value: str
    confidence: float  # 0.0 to 1.0
    turn_added: int = 0

    def at_turn(self, turn_number: int) -> "Trait":
        """Copy of this trait stamped with the turn it was confirmed on."""
        return replace(self, turn_added=turn_number)


@dataclass(frozen=True)
class Guess:
    """A candidate character with the model's confidence."""
    name: str
    confidence: float


@dataclass(frozen=True)
class Turn:
    """A completed question/answer exchange."""
    turn_number: int
    question: str
    answer: AnswerValue
    top_guesses: tuple[Guess, ...] = ()


@dataclass(frozen=True)
class GuessAttempt:
    """A final guess the player confirmed or rejected."""
    guess: str
    correct: bool
    turn_number: int


@dataclass
class CharacterFacts:
    """Known facts about a candidate character, used to validate guesses."""
    powers: bool
    gender: str
    species: str
    fictional: bool
    alignment: Optional[str] = None  # "hero" / "villain" when known


@dataclass
class RejectedCharacter:
    """A guess the player rejected, with the traits confirmed at the time."""
    name: str
    traits_when_guessed: list[Trait]
    turn_rejected: int


@dataclass
class AmbiguousQuestion:
    """A question the player could not answer."""
    question: str
    turn: int


@dataclass
class SessionLearning:
    """Knowledge gathered during one game.

    Only used as extra context for the question-proposal call; the
    deterministic validators never read it.
    """
    rejected_characters: list[RejectedCharacter] = field(default_factory=list)
    ambiguous_questions: list[AmbiguousQuestion] = field(default_factory=list)

    def record_rejected_guess(self, name: str, traits: list[Trait], turn_number: int) -> None:
        self.rejected_characters.append(
            RejectedCharacter(name=name, traits_when_guessed=list(traits), turn_rejected=turn_number)
        )

    def record_ambiguous_question(self, question: str, turn_number: int) -> None:
        self.ambiguous_questions.append(AmbiguousQuestion(question=question, turn=turn_number))

    def reset(self) -> None:
        self.rejected_characters.clear()
        self.ambiguous_questions.clear()

    @property
    def is_empty(self) -> bool:
        return not self.rejected_characters and not self.ambiguous_questions


@dataclass
class DetectiveResult:
    """Output of one detective turn."""
    question: str
    new_traits: list[Trait] = field(default_factory=list)
    top_guesses: list[Guess] = field(default_factory=list)
    fallback_reason: Optional[str] = None  # why the model's question was replaced, if it was

    @property
    def used_fallback(self) -> bool:
        return self.fallback_reason is not None


def merge_traits(existing: list[Trait], incoming: list[Trait]) -> list[Trait]:
    """Merge newly confirmed traits into the current trait list.

    Multi-valued keys accumulate distinct (key, value) pairs. Every other
    key keeps a single active trait; a new value replaces the old one in
    place.

    Args:
        existing: Currently confirmed traits
        incoming: Traits confirmed this turn

    Returns:
        New merged list (inputs are not modified)
    """
    merged = list(existing)
    for trait in incoming:
        if trait.key in MULTI_VALUED_KEYS:
            exists = any(t.key == trait.key and t.value == trait.value for t in merged)
            if not exists:
                merged.append(trait)
            continue

        for i, current in enumerate(merged):
            if current.key == trait.key:
                merged[i] = trait
                break
        else:
            merged.append(trait)
    return merged


def trait_value(traits: list[Trait], key: str) -> Optional[str]:
    """Lowercased value of the first trait with the given key, if any."""
    for trait in traits:
        if trait.key == key:
            return trait.value.lower()
    return None
