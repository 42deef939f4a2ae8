"""Prompts for the question-proposal and trait-extraction calls."""

from typing import Optional

from .models import SessionLearning, Trait, Turn, TRAIT_KEYS, trait_value


DETECTIVE_SYSTEM_PROMPT = """You are "The Detective" in a character-guessing game like Akinator.
Identify the player's secret character (fictional or real) by asking yes/no questions
that split the remaining candidates roughly in half.

Strategy:
- Turns 1-10: broad splits (fictional/real, gender, human/non-human, origin medium, powers, hero/villain).
- Turns 11-30: refine categories (appearance, role, personality, setting).
- Turns 31+: distinctive features (symbols, relationships, rare traits).

Rules:
- Ask exactly ONE question answerable with yes or no. Never ask "A or B" questions.
- Never ask about a trait key listed under "Confirmed traits".
- Never repeat or rephrase a question from the history. Every question explores a new topic.
- Once a question in a topic realm (hair, clothing, accessories, eyes, powers, weapons,
  personality) has been asked, do not ask a broader question in the same realm.
- Never ask about backgrounds, experience, history, training, careers, specific job titles,
  specific places or specific organizations. These are too narrow.
- Never ask questions that contradict confirmed traits (wings for a human, flight for a
  character without powers, magic for a real person).
- For origin questions ask where the character ORIGINATED: "Did your character originate in a video game?"

Guessing:
- Include up to 3 candidates in top_guesses with confidence = matching traits / confirmed traits.
- Only include characters that match ALL confirmed traits. Never include rejected guesses.

Respond with ONLY a JSON object, no markdown and no explanation:
{"question":"Your yes/no question?","top_guesses":[{"name":"Character Name","confidence":0.4}]}
"""

TRAIT_EXTRACTOR_PROMPT = f"""You extract one character trait from a yes/no question and its answer.

Respond with ONLY a JSON object: {{"key":"trait_key","value":"trait_value","confidence":0.95}}
If no clear trait can be extracted respond with exactly {{}}

Rules:
- "yes"/"probably": the thing asked IS true.
- "no"/"probably_not" to a binary question (male/female, human/non-human, real/fictional): record the OPPOSITE value.
- "Is your character real?" answered "no" means fictional=true.
- "no"/"probably_not" to a specific-category question (from anime? blonde hair?): respond {{}}
- "dont_know": respond {{}}
- Values are concrete words, never "unknown", "not_X" or "non_X".

Allowed keys: {", ".join(TRAIT_KEYS)}

Examples:
Q: "Is your character fictional?" A: "yes" -> {{"key":"fictional","value":"true","confidence":0.95}}
Q: "Is your character real?" A: "no" -> {{"key":"fictional","value":"true","confidence":0.95}}
Q: "Is your character male?" A: "no" -> {{"key":"gender","value":"female","confidence":0.95}}
Q: "Is your character a villain?" A: "yes" -> {{"key":"alignment","value":"villain","confidence":0.95}}
Q: "Did your character originate in a video game?" A: "yes" -> {{"key":"origin_medium","value":"video game","confidence":0.95}}
Q: "Does your character have blonde hair?" A: "no" -> {{}}
"""

# Keys whose confirmation closes a whole line of questioning
CONFIRMED_KEY_WARNINGS = {
    "origin_medium": "origin_medium is confirmed - DO NOT ask about anime, manga, games, movies, TV shows, or comics",
    "gender": "gender is confirmed - DO NOT ask about male/female",
    "species": "species is confirmed - DO NOT ask about human/non-human",
    "fictional": "fictional status is confirmed - DO NOT ask about real/fictional",
}


def trait_query(question: str, answer: str) -> str:
    """User message for the trait-extraction call."""
    return f'Q: "{question}" A: "{answer}"'


def trait_warnings(traits: list[Trait]) -> list[str]:
    """Warnings derived from confirmed trait keys and values."""
    keys = {t.key for t in traits}
    warnings = [message for key, message in CONFIRMED_KEY_WARNINGS.items() if key in keys]

    species = trait_value(traits, "species")
    has_powers = trait_value(traits, "has_powers")
    fictional = trait_value(traits, "fictional")
    if species in ("human", "person", "mortal"):
        warnings.append(
            "Character is HUMAN - DO NOT ask about wings, tail, scales, pointed ears, horns, "
            "claws, or other non-human features"
        )
    if has_powers in ("false", "no"):
        warnings.append(
            "Character has NO POWERS - DO NOT ask about flight, teleportation, telepathy, "
            "super strength, or other superpowers"
        )
    if fictional in ("false", "no", "real"):
        warnings.append(
            "Character is REAL - DO NOT ask about magic, supernatural abilities, vampires, "
            "dragons, or fantasy creatures"
        )
    return warnings


def build_question_context(
    traits: list[Trait],
    turns: list[Turn],
    rejected_guesses: list[str],
    learning: Optional[SessionLearning] = None,
) -> str:
    """Serialize the full game state for the question-proposal call.

    Nothing is truncated: every trait, every question and answer, and every
    rejected guess is sent.
    """
    parts = []

    if traits:
        confirmed_keys = ", ".join(dict.fromkeys(t.key for t in traits))
        lines = [
            f"  {t.key} = {t.value} (confidence: {round(t.confidence * 100)}%, turn {t.turn_added})"
            for t in traits
        ]
        lines.extend(f"  WARNING: {w}" for w in trait_warnings(traits))
        parts.append(
            f"Confirmed traits (NEVER ask about these trait keys again: {confirmed_keys}):\n"
            + "\n".join(lines)
        )
    else:
        parts.append("Confirmed traits: none yet")

    if turns:
        history = "\n".join(
            f'  {i}. Q: "{t.question}" A: {t.answer}' for i, t in enumerate(turns, start=1)
        )
        parts.append(
            "Questions already asked with answers (STRICTLY FORBIDDEN to repeat any of these topics):\n"
            + history
        )

    if learning is not None and learning.rejected_characters:
        lines = ["LEARNED FROM WRONG GUESSES (avoid these patterns):"]
        for rejected in learning.rejected_characters:
            summary = ", ".join(f"{t.key}={t.value}" for t in rejected.traits_when_guessed)
            lines.append(f"  {rejected.name} was guessed at turn {rejected.turn_rejected} with traits: {summary}")
            lines.append(f"    -> {rejected.name} does NOT match these traits! Avoid similar characters.")
        parts.append("\n".join(lines))

    if learning is not None and learning.ambiguous_questions:
        lines = ['AMBIGUOUS QUESTIONS (user answered "don\'t know" - avoid similar phrasing):']
        lines.extend(f'  Turn {q.turn}: "{q.question}"' for q in learning.ambiguous_questions)
        parts.append("\n".join(lines))

    if rejected_guesses:
        parts.append(f"Rejected guesses (never guess these): {', '.join(rejected_guesses)}")

    parts.append(
        f"Turn: {len(turns) + 1}. Ask ONE NEW yes/no question exploring a completely different topic. "
        "Return JSON only, no explanation."
    )
    return "\n\n".join(parts)
