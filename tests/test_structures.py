"""
Tests for data structures and entities.
"""

import pytest
from pathlib import Path

from card_creator.structures import (
    Entry, EntryKind, DeckMode, Language, LANGUAGES, SubmissionPayload,
    SubmissionOutcome, ProgressUpdate, SessionStep, Configuration, find_language
)


class TestEntry:
    """Test Entry entity."""

    def test_vocabulary_entry(self):
        """Test a vocabulary entry."""
        """Test vocabulary constructor and accessors."""
        entry = Entry.vocabulary("Hund", "dog")

        assert entry.kind == EntryKind.VOCABULARY
        assert entry.original == "Hund"
        assert entry.translated == "dog"
        assert entry.word == "Hund"
        assert entry.translation == "dog"
        assert entry.selected is True

    def test_qa_entry_field_convention(self):
        """Test the Q&A field convention."""
        """Test that questions live in translated and answers in original."""
        entry = Entry.qa("Wo liegt Paris?", "In Frankreich")

        assert entry.kind == EntryKind.QA
        assert entry.translated == "Wo liegt Paris?"
        assert entry.original == "In Frankreich"
        assert entry.question == "Wo liegt Paris?"
        assert entry.answer == "In Frankreich"

    def test_wrong_kind_accessor(self):
        """Test accessors of the other kind."""
        """Test that mode-specific accessors check the discriminant."""
        with pytest.raises(AttributeError):
            Entry.vocabulary("casa", "house").question
        with pytest.raises(AttributeError):
            Entry.qa("Q", "A").word

    def test_kind_string_conversion(self):
        """Test converting kind strings."""
        """Test string to enum conversion."""
        entry = Entry(original="a", translated="b", kind="qa")
        assert entry.kind == EntryKind.QA


class TestLanguage:
    """Test Language lookup."""

    def test_languages_sorted_by_name(self):
        """Test that languages are sorted by name."""
        names = [language.name for language in LANGUAGES]
        assert names == sorted(names)
        assert len(LANGUAGES) == 16

    def test_find_language(self):
        """Test looking up a language."""
        assert find_language("de") == Language("de", "Deutsch")
        assert find_language("english") == Language("en", "English")
        assert find_language("FA-af").name == "دری"
        assert find_language("xx") is None

    def test_language_is_immutable(self):
        """Test that languages are immutable."""
        language = Language("en", "English")
        with pytest.raises(Exception):
            language.code = "de"


class TestDeckMode:
    """Test DeckMode entity."""

    def test_entry_kind(self):
        """Test the entry kind of each mode."""
        assert DeckMode.VOCABULARY.entry_kind == EntryKind.VOCABULARY
        assert DeckMode.QA.entry_kind == EntryKind.QA


class TestSubmissionPayload:
    """Test SubmissionPayload entity."""

    def test_to_dict(self):
        """Test converting to a dictionary."""
        payload = SubmissionPayload(deck_name="Spanish", vocabulary={"house": "casa"})

        assert payload.to_dict() == {"deck_name": "Spanish", "vocabulary": {"house": "casa"}}


class TestSubmissionOutcome:
    """Test SubmissionOutcome entity."""

    def test_filename(self):
        """Test the artifact file name."""
        assert SubmissionOutcome(success=True, deck_name="Spanish").filename == "Spanish.apkg"
        assert SubmissionOutcome(success=True, deck_name="").filename == "Anki-Cards.apkg"


class TestProgressUpdate:
    """Test ProgressUpdate entity."""

    def test_progress_creation(self):
        """Test creating a progress update."""
        progress = ProgressUpdate(label="Generating cards...", step=SessionStep.PROCESSING)

        assert progress.label == "Generating cards..."
        assert progress.step == SessionStep.PROCESSING
        assert progress.finished is False


class TestConfiguration:
    """Test Configuration entity."""

    def test_defaults(self):
        """Test default values."""
        config = Configuration(gemini_api_key="test_key")

        assert config.llm_provider == "gemini"
        assert config.request_timeout == 30.0
        assert config.use_direct_route is True
        assert len(config.relay_routes) == 3
        assert config.validate() == []

    def test_configuration_validation(self):
        """Test configuration validation."""
        """Test configuration validation."""
        config = Configuration(gemini_api_key="")
        errors = config.validate()
        assert len(errors) == 1
        assert "Gemini API key is required" in errors[0]

        config = Configuration(llm_provider="groq", groq_api_key="")
        assert "Groq API key is required" in config.validate()

        config = Configuration(llm_provider="other")
        assert "Unknown LLM provider: other" in config.validate()

        config = Configuration(gemini_api_key="k", request_timeout=0)
        assert "Request timeout must be positive" in config.validate()

        config = Configuration(gemini_api_key="k", relay_routes=[], use_direct_route=False)
        assert "At least one submission route is required" in config.validate()

    def test_string_conversion(self):
        """Test converting to a string."""
        """Test string to Path and list conversion."""
        config = Configuration(
            llm_provider="GROQ",
            output_dir="decks",
            relay_routes="https://a.example/?, https://b.example/?url=",
        )

        assert config.llm_provider == "groq"
        assert isinstance(config.output_dir, Path)
        assert str(config.output_dir) == "decks"
        assert config.relay_routes == ["https://a.example/?", "https://b.example/?url="]
