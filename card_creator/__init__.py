"""
Vocabulary Card Creator

Turns free text, photos or questions into Anki flashcard decks using a
generative language model and a remote deck-building service.

This package provides:
- Model gateways for Gemini and Groq
- A response parser for vocabulary and question/answer cards
- An entry editor for reviewing cards before submission
- A submission client with relay-route fallback
- A session controller sequencing the whole flow, plus a CLI
"""

__version__ = "1.0.0"
__author__ = "Vocabulary Card Creator Team"

from card_creator.structures import (
    Entry, EntryKind, Language, LANGUAGES, DeckMode, InputKind,
    EncodedImage, SubmissionPayload, SubmissionOutcome, SessionState,
    SessionStep, ProgressUpdate, Configuration, find_language
)

from card_creator.errors import (
    CardCreatorError, EncodingError, GatewayError, GatewayErrorKind,
    ParseError, SubmissionError, SubmissionErrorKind, SessionStateError
)

from card_creator.config import get_config, validate_config, setup_directories, get_api_credentials

from card_creator.image_encoder import encode_image

from card_creator.llm import (
    create_model_gateway, ModelGateway, GeminiModelGateway, GroqModelGateway, MockModelGateway
)

from card_creator.parser import ResponseParser, ParsePolicy, parse_response

from card_creator.editor import EntryEditor

from card_creator.submission import (
    SubmissionClient, Route, build_routes, build_payload, save_artifact, create_submission_client
)

from card_creator.session import SessionFlow

__all__ = [
    # Structures
    'Entry', 'EntryKind', 'Language', 'LANGUAGES', 'DeckMode', 'InputKind',
    'EncodedImage', 'SubmissionPayload', 'SubmissionOutcome', 'SessionState',
    'SessionStep', 'ProgressUpdate', 'Configuration', 'find_language',

    # Errors
    'CardCreatorError', 'EncodingError', 'GatewayError', 'GatewayErrorKind',
    'ParseError', 'SubmissionError', 'SubmissionErrorKind', 'SessionStateError',

    # Configuration
    'get_config', 'validate_config', 'setup_directories', 'get_api_credentials',

    # Pipeline
    'encode_image',
    'create_model_gateway', 'ModelGateway', 'GeminiModelGateway', 'GroqModelGateway', 'MockModelGateway',
    'ResponseParser', 'ParsePolicy', 'parse_response',
    'EntryEditor',
    'SubmissionClient', 'Route', 'build_routes', 'build_payload', 'save_artifact', 'create_submission_client',
    'SessionFlow',
]
