"""
Session controller for the card creation flow.

A session walks through language selection, input acquisition, deck mode
selection, entry editing and submission. Every model or backend call runs
inside a transient processing state; on failure the error is reported to the
``on_error`` listener and the session rolls back to the state it was in
before the call, never forward.
"""

import logging
from typing import Callable, Optional, Union

from card_creator.editor import EntryEditor
from card_creator.errors import (
    CardCreatorError, SessionStateError, SubmissionError, SubmissionErrorKind
)
from card_creator.image_encoder import ImageSource, encode_image
from card_creator.llm import ModelGateway
from card_creator.parser import ParsePolicy, ResponseParser
from card_creator.prompts import (
    create_image_extraction_prompt, create_qa_prompt, create_question_prompt,
    create_vocabulary_prompt
)
from card_creator.structures import (
    DeckMode, InputKind, Language, ProgressUpdate, SessionState, SessionStep,
    SubmissionOutcome, find_language
)
from card_creator.submission import SubmissionClient

logger = logging.getLogger(__name__)

StateListener = Callable[[SessionState], None]
ProgressListener = Callable[[ProgressUpdate], None]
ErrorListener = Callable[[CardCreatorError], None]


class SessionFlow:
    """Finite-state controller sequencing the card creation pipeline."""

    def __init__(self, gateway: ModelGateway, submission_client: SubmissionClient,
                 parser: Optional[ResponseParser] = None,
                 parse_policy: Optional[ParsePolicy] = None,
                 on_state_change: Optional[StateListener] = None,
                 on_progress: Optional[ProgressListener] = None,
                 on_error: Optional[ErrorListener] = None):
        self.gateway = gateway
        self.submission_client = submission_client
        self.parser = parser or ResponseParser()
        self.parse_policy = parse_policy
        self.on_state_change = on_state_change
        self.on_progress = on_progress
        self.on_error = on_error

        self.step = SessionStep.LANGUAGE_SELECT
        self.progress_label = ""
        self._clear()

    def _clear(self):
        self.language: Optional[Language] = None
        self.input_kind: Optional[InputKind] = None
        self.content = ""
        self.mode: Optional[DeckMode] = None
        self.deck_name = ""
        self.editor: Optional[EntryEditor] = None
        self.outcome: Optional[SubmissionOutcome] = None
        self.last_error: Optional[CardCreatorError] = None

    @property
    def state(self) -> SessionState:
        """Snapshot of the current state for presentation."""
        return SessionState(
            step=self.step,
            progress_label=self.progress_label,
            entries=self.editor.entries if self.editor else [],
            outcome=self.outcome,
        )

    def _require(self, *steps: SessionStep):
        if self.step not in steps:
            expected = ", ".join(step.value for step in steps)
            raise SessionStateError(f"Cannot do this while in '{self.step.value}' (expected {expected})")

    def _move_to(self, step: SessionStep, label: str = ""):
        logger.debug("Session %s -> %s", self.step.value, step.value)
        self.step = step
        self.progress_label = label
        if self.on_state_change:
            self.on_state_change(self.state)

    def _run(self, label: str, rollback: SessionStep, operation: Callable[[], SessionStep]) -> bool:
        """Run ``operation`` inside the processing state, rolling back on failure."""
        self._move_to(SessionStep.PROCESSING, label)
        if self.on_progress:
            self.on_progress(ProgressUpdate(label=label, step=SessionStep.PROCESSING))

        next_step = rollback
        succeeded = False
        # Unexpected exceptions still propagate, but never leave the session processing.
        try:
            try:
                next_step = operation()
            except CardCreatorError as e:
                logger.info("%s failed: %s", label, e.message)
                self._report(e)
            else:
                self.last_error = None
                succeeded = True
        finally:
            self._move_to(next_step)
            if self.on_progress:
                self.on_progress(ProgressUpdate(label=label, step=next_step, finished=True))

        return succeeded

    def _report(self, error: CardCreatorError):
        self.last_error = error
        if self.on_error:
            self.on_error(error)

    def select_language(self, language: Union[Language, str]):
        """Pick the translation target and move on to input acquisition."""
        self._require(SessionStep.LANGUAGE_SELECT)
        if isinstance(language, str):
            found = find_language(language)
            if found is None:
                raise ValueError(f"Unknown language: {language}")
            language = found
        self.language = language
        self._move_to(SessionStep.INPUT_ACQUIRE)

    def provide_text(self, text: str) -> bool:
        """Use typed or pasted text as the card material."""
        self._require(SessionStep.INPUT_ACQUIRE)
        if not text or not text.strip():
            raise ValueError("Text input must not be empty")

        def accept():
            self.input_kind = InputKind.TEXT
            self.content = text
            return SessionStep.MODE_SELECT

        return self._run("Processing text...", SessionStep.INPUT_ACQUIRE, accept)

    def provide_image(self, source: ImageSource, kind: InputKind = InputKind.PHOTO) -> bool:
        """Extract text from a photo or gallery image and use it as card material."""
        self._require(SessionStep.INPUT_ACQUIRE)
        if kind not in (InputKind.PHOTO, InputKind.GALLERY):
            raise ValueError(f"Not an image input kind: {kind}")

        def extract():
            image = encode_image(source)
            self.content = self.gateway.invoke(create_image_extraction_prompt(), image)
            self.input_kind = kind
            return SessionStep.MODE_SELECT

        return self._run("Processing image...", SessionStep.INPUT_ACQUIRE, extract)

    def ask_question(self, question: str) -> bool:
        """Ask the model a question and use the question with its answer as card material."""
        self._require(SessionStep.INPUT_ACQUIRE)
        if not question or not question.strip():
            raise ValueError("Please enter a question")

        def answer():
            reply = self.gateway.invoke(create_question_prompt(question.strip()))
            self.content = f"{question.strip()}\n\n{reply}"
            self.input_kind = InputKind.QUESTION
            return SessionStep.MODE_SELECT

        return self._run("Answering question...", SessionStep.INPUT_ACQUIRE, answer)

    def choose_mode(self, mode: DeckMode) -> bool:
        """Generate entries of the chosen deck type from the current material."""
        self._require(SessionStep.MODE_SELECT)

        def generate():
            if mode is DeckMode.VOCABULARY:
                prompt = create_vocabulary_prompt(self.content, self.language)
            else:
                prompt = create_qa_prompt(self.content, self.language)

            reply = self.gateway.invoke(prompt)
            entries = self.parser.parse(reply, mode, self.parse_policy)
            self.mode = mode
            self.editor = EntryEditor(entries)
            return SessionStep.EDITING

        return self._run("Generating cards...", SessionStep.MODE_SELECT, generate)

    def set_deck_name(self, name: str):
        self._require(SessionStep.INPUT_ACQUIRE, SessionStep.MODE_SELECT, SessionStep.EDITING)
        self.deck_name = name

    def submit(self) -> bool:
        """Send the selected entries to the deck-building backend."""
        self._require(SessionStep.EDITING)
        selected = self.editor.selected_entries()
        if not selected:
            self._report(SubmissionError("Please select at least one word.", SubmissionErrorKind.BAD_REQUEST))
            return False

        def deliver():
            self.outcome = self.submission_client.submit(selected, self.deck_name)
            return SessionStep.RESULT

        return self._run("Generating Anki deck...", SessionStep.EDITING, deliver)

    def back_to_input(self):
        """Discard the current material and acquire new input."""
        self._require(SessionStep.MODE_SELECT, SessionStep.EDITING)
        self.input_kind = None
        self.content = ""
        self.mode = None
        self.editor = None
        self._move_to(SessionStep.INPUT_ACQUIRE)

    def reset(self):
        """Discard all session data and start over at language selection."""
        if self.step is SessionStep.PROCESSING:
            raise SessionStateError("Cannot reset while a request is in progress")
        self._clear()
        self._move_to(SessionStep.LANGUAGE_SELECT)
