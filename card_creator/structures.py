"""
Data structures and entities for the Vocabulary Card Creator.
This module defines all the core data structures used throughout the application.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict
from pathlib import Path
from enum import Enum


DEFAULT_DECK_NAME = "Default Deck"
DEFAULT_ARTIFACT_NAME = "Anki-Cards"

DEFAULT_BACKEND_URL = "https://dianjeol.pythonanywhere.com/api/convert-direct"

DEFAULT_RELAY_ROUTES = [
    "https://api.allorigins.win/raw?url=",
    "https://corsproxy.io/?",
    "https://cors.bridged.cc/",
]


class EntryKind(Enum):
    """Discriminant for the two kinds of flashcard entries."""
    VOCABULARY = "vocabulary"
    QA = "qa"


class DeckMode(Enum):
    """Type of deck requested from the model."""
    VOCABULARY = "vocabulary"
    QA = "qa"

    @property
    def entry_kind(self) -> EntryKind:
        return EntryKind(self.value)


class InputKind(Enum):
    """How the raw content entered the session."""
    TEXT = "text"
    PHOTO = "photo"
    GALLERY = "gallery"
    QUESTION = "question"


class SessionStep(Enum):
    """Structural states of a card creation session."""
    LANGUAGE_SELECT = "language_select"
    INPUT_ACQUIRE = "input_acquire"
    MODE_SELECT = "mode_select"
    PROCESSING = "processing"
    EDITING = "editing"
    RESULT = "result"


@dataclass(frozen=True)
class Language:
    """A translation target language."""
    code: str
    name: str


LANGUAGES = sorted([
    Language("ar", "العربية"),
    Language("am", "አማርኛ"),
    Language("de", "Deutsch"),
    Language("fa-AF", "دری"),
    Language("en", "English"),
    Language("es", "Español"),
    Language("fr", "Français"),
    Language("it", "Italiano"),
    Language("ka", "ქართული"),
    Language("ku", "Kurdî"),
    Language("pt", "Português"),
    Language("so", "Soomaali"),
    Language("ti", "ትግርኛ"),
    Language("tr", "Türkçe"),
    Language("uk", "Українська"),
    Language("zh", "中文"),
], key=lambda language: language.name)


def find_language(code_or_name: str) -> Optional[Language]:
    """Look up a language by its code or display name (case-insensitive)."""
    needle = code_or_name.strip().lower()
    for language in LANGUAGES:
        if language.code.lower() == needle or language.name.lower() == needle:
            return language
    return None


@dataclass
class Entry:
    """
    One flashcard's front/back pair plus its selection state.

    Vocabulary entries store the source word in ``original`` and its
    translation in ``translated``. Q&A entries store the question in
    ``translated`` and the answer in ``original``, so the submission
    mapping is the same for both kinds.
    """
    original: str
    translated: str
    selected: bool = True
    kind: EntryKind = EntryKind.VOCABULARY

    def __post_init__(self):
        if isinstance(self.kind, str):
            self.kind = EntryKind(self.kind)

    @classmethod
    def vocabulary(cls, word: str, translation: str) -> "Entry":
        return cls(original=word, translated=translation, kind=EntryKind.VOCABULARY)

    @classmethod
    def qa(cls, question: str, answer: str) -> "Entry":
        return cls(original=answer, translated=question, kind=EntryKind.QA)

    def _require(self, kind: EntryKind, name: str):
        if self.kind is not kind:
            raise AttributeError(f"'{name}' is not available on a {self.kind.value} entry")

    @property
    def word(self) -> str:
        self._require(EntryKind.VOCABULARY, "word")
        return self.original

    @property
    def translation(self) -> str:
        self._require(EntryKind.VOCABULARY, "translation")
        return self.translated

    @property
    def question(self) -> str:
        self._require(EntryKind.QA, "question")
        return self.translated

    @property
    def answer(self) -> str:
        self._require(EntryKind.QA, "answer")
        return self.original


@dataclass(frozen=True)
class EncodedImage:
    """Base64 image payload ready to be sent to the model."""
    data: str
    mime_type: str = "image/jpeg"


@dataclass
class SubmissionPayload:
    """Body posted to the deck-building backend."""
    deck_name: str
    vocabulary: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        return {"deck_name": self.deck_name, "vocabulary": dict(self.vocabulary)}


@dataclass
class SubmissionOutcome:
    """Result of a successful deck submission."""
    success: bool
    deck_name: str
    artifact: Optional[bytes] = None
    download_url: Optional[str] = None
    route: Optional[str] = None

    @property
    def filename(self) -> str:
        """Download filename used for the .apkg artifact."""
        return f"{self.deck_name or DEFAULT_ARTIFACT_NAME}.apkg"


@dataclass
class SessionState:
    """Snapshot of a session handed to presentation listeners."""
    step: SessionStep
    progress_label: str = ""
    entries: List[Entry] = field(default_factory=list)
    outcome: Optional[SubmissionOutcome] = None


@dataclass
class ProgressUpdate:
    """Progress notification emitted around long-running calls."""
    label: str
    step: SessionStep
    finished: bool = False


@dataclass
class Configuration:
    """Application configuration."""
    llm_provider: str = "gemini"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash-exp"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    groq_api_key: str = ""
    groq_model: str = "meta-llama/llama-4-maverick-17b-128e-instruct"
    backend_url: str = DEFAULT_BACKEND_URL
    relay_routes: List[str] = field(default_factory=lambda: list(DEFAULT_RELAY_ROUTES))
    use_direct_route: bool = True
    request_timeout: float = 30.0
    output_dir: Path = Path("anki_output")
    debug_mode: bool = False

    def __post_init__(self):
        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)
        if isinstance(self.relay_routes, str):
            self.relay_routes = [route.strip() for route in self.relay_routes.split(",") if route.strip()]
        self.llm_provider = self.llm_provider.lower()

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if self.llm_provider == "gemini":
            if not self.gemini_api_key:
                errors.append("Gemini API key is required")
        elif self.llm_provider == "groq":
            if not self.groq_api_key:
                errors.append("Groq API key is required")
        else:
            errors.append(f"Unknown LLM provider: {self.llm_provider}")

        if self.request_timeout <= 0:
            errors.append("Request timeout must be positive")

        if not self.backend_url:
            errors.append("Deck backend URL is required")
        elif not self.use_direct_route and not self.relay_routes:
            errors.append("At least one submission route is required")

        return errors
