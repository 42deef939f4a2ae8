"""Topic fingerprints for free-text yes/no questions.

A fingerprint is the set of topically meaningful words in a question.
Two questions are compared by counting fingerprint words that are equal,
synonyms, or substrings of each other.
"""

import re


# Words that carry no topical meaning
STOP_WORDS = frozenset({
    "is", "your", "character", "a", "an", "the", "does", "did", "do", "are", "was", "were",
    "from", "of", "in", "to", "for", "at", "by", "with", "has", "have", "had", "be", "been",
    "this", "that", "it", "its", "they", "their", "or", "and", "not", "any", "ever",
    "primarily", "mainly", "mostly", "based", "known", "typically", "often", "usually",
    # verbs that don't indicate topic similarity
    "use", "uses", "wear", "wears", "wearing", "associated", "part",
    # qualifiers that only make a question narrower
    "specific", "particular", "certain", "background",
})

# True synonyms only. Different values of one category (hero/villain,
# sword/gun, costume/armor) must stay in separate groups.
SEMANTIC_GROUPS: tuple[frozenset[str], ...] = (
    frozenset({"fictional", "imaginary", "fantasy"}),
    frozenset({"real", "reality", "actual"}),
    frozenset({"male", "man", "boy"}),
    frozenset({"female", "woman", "girl"}),
    frozenset({"gender", "sex"}),
    frozenset({"human", "person", "people", "mortal"}),
    frozenset({"anime", "manga"}),
    frozenset({"cartoon", "animated", "animation"}),
    frozenset({"game", "gaming", "videogame", "video"}),
    frozenset({"movie", "film", "cinema"}),
    frozenset({"show", "television", "series", "program"}),
    frozenset({"comic", "comics", "graphic"}),
    frozenset({"power", "powers", "ability", "abilities"}),
    frozenset({"supernatural", "magic", "magical"}),
    frozenset({"hero", "superhero", "protagonist"}),
    frozenset({"villain", "supervillain", "antagonist"}),
    frozenset({"team", "group", "crew", "squad", "organization"}),
    frozenset({"weapon", "weapons", "armed"}),
    # politics
    frozenset({"political", "politics", "politician", "campaign", "election", "elected", "office"}),
    frozenset({"government", "govern", "governance", "administration"}),
    frozenset({"debate", "debating", "argument", "arguing"}),
    frozenset({"rival", "enemy", "opposition", "opponent", "adversary", "foe"}),
    frozenset({"ally", "allies", "friend", "partner", "supporter"}),
    frozenset({"reform", "change", "transformation", "reforming"}),
    frozenset({"legislation", "law", "laws", "legal", "legislative"}),
    frozenset({"advocacy", "advocate", "advocating", "champion", "championing"}),
    # communication and media
    frozenset({"communication", "communicate", "communicating", "message", "messaging"}),
    frozenset({"journalism", "journalist", "reporter", "press", "news", "media"}),
    # work history
    frozenset({"background", "history", "experience", "training", "education", "studied"}),
    frozenset({"occupation", "job", "career", "profession", "work", "working", "employed"}),
)

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_NON_ALPHA = re.compile(r"[^a-z\s]")
MIN_WORD_LENGTH = 3


def topic_words(question: str) -> set[str]:
    """Extract the topical keywords from a question.

    Args:
        question: Free-text question

    Returns:
        Lowercased words longer than two characters that are not stop words
    """
    cleaned = _NON_ALNUM.sub("", question.lower())
    return {
        word for word in cleaned.split()
        if len(word) >= MIN_WORD_LENGTH and word not in STOP_WORDS
    }


def normalize_question(question: str) -> str:
    """Lowercase and keep only letters and whitespace, for exact comparisons."""
    return _NON_ALPHA.sub("", question.lower()).strip()


def same_semantic_group(word1: str, word2: str) -> bool:
    return any(word1 in group and word2 in group for group in SEMANTIC_GROUPS)


def are_semantically_related(word1: str, word2: str, allow_substring: bool = True) -> bool:
    """Check if two fingerprint words refer to the same topic.

    Words are related when equal, in the same synonym group, or (with
    allow_substring) when one contains the other, which catches plurals
    and derivations like "power"/"powers" but also over-matches pairs
    like "man"/"woman".

    Args:
        word1: First word
        word2: Second word
        allow_substring: Apply the substring rule

    Returns:
        True if the words are treated as the same topic
    """
    if word1 == word2:
        return True
    if same_semantic_group(word1, word2):
        return True
    if allow_substring and (word1 in word2 or word2 in word1):
        return True
    return False
