"""
Main entry point for the Vocabulary Card Creator.
Command-line front end driving a card creation session.
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional

from card_creator.config import get_config, validate_config, update_config
from card_creator.editor import EntryEditor
from card_creator.errors import CardCreatorError
from card_creator.llm import create_model_gateway
from card_creator.session import SessionFlow
from card_creator.structures import LANGUAGES, DeckMode, InputKind
from card_creator.submission import create_submission_client, save_artifact


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Create Anki flashcards from text, images or questions using AI."
    )

    parser.add_argument(
        "-l", "--language",
        type=str,
        help="Target language code or name (see --list-languages)"
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "-t", "--text",
        type=str,
        help="Text to extract cards from"
    )
    source.add_argument(
        "-f", "--text-file",
        type=Path,
        help="Path to a text file to extract cards from"
    )
    source.add_argument(
        "--image",
        type=Path,
        help="Path to an image from the gallery"
    )
    source.add_argument(
        "--photo",
        type=Path,
        help="Path to a freshly taken photo"
    )
    source.add_argument(
        "-q", "--question",
        type=str,
        help="Ask a question and build cards from the answer"
    )

    parser.add_argument(
        "-m", "--mode",
        choices=[mode.value for mode in DeckMode],
        default=DeckMode.VOCABULARY.value,
        help="Type of cards to create (default: vocabulary)"
    )

    parser.add_argument(
        "-d", "--deck-name",
        type=str,
        default="",
        help="Name of the Anki deck (default: Default Deck)"
    )

    parser.add_argument(
        "-o", "--output-dir",
        type=Path,
        help="Directory for the downloaded .apkg file"
    )

    parser.add_argument(
        "--review",
        action="store_true",
        help="Review the generated cards and deselect some before submitting"
    )

    parser.add_argument(
        "--list-languages",
        action="store_true",
        help="List supported target languages and exit"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def print_languages():
    for language in LANGUAGES:
        print(f"{language.code:6} {language.name}")


def print_entries(editor: EntryEditor):
    """Print the working set with selection marks."""
    for index, entry in enumerate(editor):
        mark = "x" if entry.selected else " "
        print(f"[{mark}] {index:3}  {entry.translated}  ->  {entry.original}")


def review_entries(editor: EntryEditor):
    """Let the user toggle entries by index until they press Enter."""
    while True:
        print_entries(editor)
        answer = input("Toggle entries (indices separated by spaces, Enter to continue): ").strip()
        if not answer:
            return

        for token in answer.split():
            try:
                editor.toggle(int(token))
            except (ValueError, IndexError):
                print(f"Ignoring invalid index: {token}")


def report_error(error: CardCreatorError):
    print(f"Error: {error.message}")


def run_cli(argv: Optional[List[str]] = None) -> int:
    """Run the application in CLI mode."""
    args = parse_arguments(argv)

    if args.list_languages:
        print_languages()
        return 0

    config = get_config()
    if args.debug:
        update_config(debug_mode=True)
    if args.output_dir:
        update_config(output_dir=args.output_dir)
    setup_logging(config.debug_mode)

    errors = validate_config()
    if errors:
        print("Configuration errors:")
        for error in errors:
            print(f"  - {error}")
        return 1

    if not args.language:
        print("Error: a target language is required (--language)")
        return 1

    session = SessionFlow(
        create_model_gateway(config),
        create_submission_client(config),
        on_progress=lambda update: None if update.finished else print(update.label),
        on_error=report_error,
    )

    try:
        session.select_language(args.language)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if args.deck_name:
        session.set_deck_name(args.deck_name)

    if not acquire_input(session, args):
        return 1

    if not session.choose_mode(DeckMode(args.mode)):
        return 1

    print(f"Generated {len(session.editor)} cards:")
    if args.review:
        review_entries(session.editor)
    else:
        print_entries(session.editor)

    if not session.submit():
        return 1

    outcome = session.outcome
    if outcome.artifact:
        path = save_artifact(outcome, config.output_dir)
        print(f"Your Anki deck is ready: {path}")
    elif outcome.download_url:
        print(f"Your Anki deck is ready: {outcome.download_url}")
    else:
        print("Your Anki deck is ready.")

    session.reset()
    return 0


def acquire_input(session: SessionFlow, args) -> bool:
    """Feed the chosen input source into the session."""
    if args.text:
        return session.provide_text(args.text)

    if args.text_file:
        try:
            text = args.text_file.read_text(encoding="utf-8")
        except OSError as e:
            print(f"Error reading input file: {e}")
            return False
        if not text.strip():
            print("No text to process.")
            return False
        return session.provide_text(text)

    if args.photo:
        return session.provide_image(args.photo, InputKind.PHOTO)

    if args.image:
        return session.provide_image(args.image, InputKind.GALLERY)

    if args.question:
        return session.ask_question(args.question)

    if sys.stdin.isatty():
        print("Paste your text here (finish with Ctrl-D):")
    text = sys.stdin.read()
    if not text.strip():
        print("No text to process.")
        return False
    return session.provide_text(text)


def main():
    """Main entry point."""
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
