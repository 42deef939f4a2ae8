#!/usr/bin/env python3
"""CLI entry point for the detective guessing game."""

import argparse
import logging
import sys
from pathlib import Path

# Add the project directory to path for detective imports
sys.path.insert(0, str(Path(__file__).parent))

from detective.config import load_config
from detective.errors import ProviderError
from detective.fallback import pick_fallback
from detective.guesses import DuckDuckGoLookup, GuessValidator
from detective.models import Trait
from detective.redundancy import validate_question
from detective.session import Phase, create_session


# Short answers accepted at the prompt
ANSWER_ALIASES = {
    "y": "yes",
    "yes": "yes",
    "n": "no",
    "no": "no",
    "p": "probably",
    "probably": "probably",
    "pn": "probably_not",
    "probably_not": "probably_not",
    "?": "dont_know",
    "dk": "dont_know",
    "dont_know": "dont_know",
}


def read_answer(prompt: str) -> str:
    """Prompt until the player types a recognised answer."""
    while True:
        raw = input(prompt).strip().lower()
        if raw in ANSWER_ALIASES:
            return ANSWER_ALIASES[raw]
        print("Answer with y, n, p (probably), pn (probably not) or ? (don't know)")


def parse_traits(args: list[str]) -> list[Trait]:
    """Parse key=value trait arguments."""
    traits = []
    for arg in args:
        key, sep, value = arg.partition("=")
        if not sep or not key or not value:
            raise ValueError(f"Trait must look like key=value, got {arg!r}")
        traits.append(Trait(key=key.strip(), value=value.strip(), confidence=0.95))
    return traits


def cmd_play(args):
    """Play a game in the terminal."""
    config = load_config(args.config)
    if args.no_lookup:
        config.lookup.enabled = False
    session = create_session(config)
    session.start_game()

    print(f"Think of a character. Model: {config.provider.model_name} ({config.provider.provider})")
    print("=" * 60)

    while True:
        try:
            session.advance()
        except ProviderError as e:
            print(f"Error: {e}")
            sys.exit(1)

        if session.phase == Phase.GUESSING:
            verdict = read_answer(f"\nIs your character {session.final_guess}? ")
            session.confirm_guess(verdict in ("yes", "probably"))
            if session.phase == Phase.REVEALED:
                print(f"Got it in {session.turn} questions!")
                return
            continue

        if args.verbose and session.traits:
            print("  traits: " + ", ".join(f"{t.key}={t.value}" for t in session.traits))
        if session.top_guesses:
            print("  thinking of: " + ", ".join(f"{g.name} ({g.confidence:.0%})" for g in session.top_guesses))
        session.submit_answer(read_answer(f"\n{session.turn}. {session.current_question} "))


def cmd_check(args):
    """Run the validators on a candidate question."""
    try:
        traits = parse_traits(args.trait or [])
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    priors = list(args.prior or [])
    if args.history:
        with open(args.history) as f:
            priors.extend(line.strip() for line in f if line.strip())

    reason = validate_question(args.question, priors, traits)
    if reason is None:
        print(f"OK: {args.question}")
        return

    print(f"Rejected ({reason}): {args.question}")
    print(f"Fallback: {pick_fallback(priors, {t.key for t in traits}, traits)}")


def cmd_lookup(args):
    """Show what is known about a character name."""
    config = load_config(args.config)
    lookup = DuckDuckGoLookup(endpoint=config.lookup.endpoint, timeout=config.lookup.timeout)
    facts = GuessValidator(lookup).facts_for(args.name)
    if facts is None:
        print(f"Nothing known about {args.name}")
        return

    print(f"{args.name}:")
    print(f"  fictional: {facts.fictional}")
    print(f"  gender:    {facts.gender}")
    print(f"  species:   {facts.species}")
    print(f"  powers:    {facts.powers}")
    print(f"  alignment: {facts.alignment or '-'}")


def main():
    parser = argparse.ArgumentParser(
        description="Akinator-style guessing game against a local language model"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a game in the terminal")
    play_parser.add_argument("--config", help="JSON config file")
    play_parser.add_argument("--no-lookup", action="store_true", help="Disable web lookup of guesses")
    play_parser.set_defaults(func=cmd_play)

    # Check command
    check_parser = subparsers.add_parser("check", help="Validate a candidate question")
    check_parser.add_argument("question", help="Candidate question")
    check_parser.add_argument("--prior", action="append", help="Already-asked question (repeatable)")
    check_parser.add_argument("--history", help="File with one already-asked question per line")
    check_parser.add_argument("--trait", action="append", help="Confirmed trait as key=value (repeatable)")
    check_parser.set_defaults(func=cmd_check)

    # Lookup command
    lookup_parser = subparsers.add_parser("lookup", help="Look up facts about a character")
    lookup_parser.add_argument("name", help="Character name")
    lookup_parser.add_argument("--config", help="JSON config file")
    lookup_parser.set_defaults(func=cmd_lookup)

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
