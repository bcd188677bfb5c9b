"""
Submission of the selected entries to the deck-building backend.
Tries the direct endpoint first, then each relay route, and classifies failures.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence
from urllib.parse import quote

import requests

from card_creator.errors import SubmissionError, SubmissionErrorKind, SUBMISSION_MESSAGES
from card_creator.structures import (
    Configuration, Entry, SubmissionOutcome, SubmissionPayload, DEFAULT_DECK_NAME
)

logger = logging.getLogger(__name__)

STATUS_KINDS = {
    400: SubmissionErrorKind.BAD_REQUEST,
    413: SubmissionErrorKind.TOO_LARGE,
    429: SubmissionErrorKind.RATE_LIMITED,
}

LOCATOR_KEYS = ("download_url", "url", "file_url")


@dataclass(frozen=True)
class Route:
    """One way of reaching the backend."""
    name: str
    url: str


def build_routes(backend_url: str, relay_prefixes: Iterable[str] = (), include_direct: bool = True) -> List[Route]:
    """Direct route first, then every relay prefix in order."""
    routes = []
    if include_direct:
        routes.append(Route("direct", backend_url))

    encoded = quote(backend_url, safe="")
    for prefix in relay_prefixes:
        routes.append(Route(prefix, f"{prefix}{encoded}"))

    return routes


def build_payload(entries: Iterable[Entry], deck_name: Optional[str]) -> SubmissionPayload:
    """Map translated text to original text; a repeated translation keeps the last entry."""
    vocabulary = {}
    for entry in entries:
        vocabulary[entry.translated.strip()] = entry.original.strip()

    name = (deck_name or "").strip() or DEFAULT_DECK_NAME
    return SubmissionPayload(deck_name=name, vocabulary=vocabulary)


def classify_status(status_code: int) -> SubmissionErrorKind:
    if status_code in STATUS_KINDS:
        return STATUS_KINDS[status_code]
    if 500 <= status_code < 600:
        return SubmissionErrorKind.SERVER_ERROR
    return SubmissionErrorKind.UNKNOWN


def _structured_message(content: bytes) -> Optional[str]:
    """Error text from a JSON error body, if the backend sent one."""
    try:
        data = json.loads(content.decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(data, dict):
        return None
    message = data.get("error") or data.get("message")
    return message if isinstance(message, str) and message else None


def _is_json(response) -> bool:
    content_type = response.headers.get("Content-Type", "")
    return "json" in content_type.lower()


class SubmissionClient:
    """Posts a deck to the backend through an ordered list of routes."""

    def __init__(self, routes: Sequence[Route], timeout: float = 30.0,
                 session: Optional[requests.Session] = None):
        if not routes:
            raise ValueError("At least one submission route is required")
        self.routes = list(routes)
        self.timeout = timeout
        self.session = session or requests.Session()

    def submit(self, entries: Iterable[Entry], deck_name: Optional[str]) -> SubmissionOutcome:
        """Deliver the entries, returning the first successful route's outcome."""
        payload = build_payload(entries, deck_name).to_dict()
        last_error: Optional[SubmissionError] = None

        for route in self.routes:
            try:
                outcome = self._attempt(route, payload)
            except SubmissionError as e:
                logger.warning("Route %s failed: %s", route.name, e.message)
                last_error = e
                continue

            logger.info("Deck '%s' delivered via %s", payload["deck_name"], route.name)
            return outcome

        raise last_error or SubmissionError(kind=SubmissionErrorKind.UNKNOWN)

    def _attempt(self, route: Route, payload: dict) -> SubmissionOutcome:
        try:
            response = self.session.post(
                route.url,
                json=payload,
                headers={
                    "Content-Type": "application/json",
                    "X-Requested-With": "XMLHttpRequest",
                },
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise SubmissionError(kind=SubmissionErrorKind.TIMEOUT) from e
        except requests.exceptions.ConnectionError as e:
            raise SubmissionError(kind=SubmissionErrorKind.NETWORK_UNREACHABLE) from e
        except requests.exceptions.RequestException as e:
            raise SubmissionError(kind=SubmissionErrorKind.UNKNOWN) from e

        content = response.content or b""

        if not 200 <= response.status_code < 300:
            kind = classify_status(response.status_code)
            message = _structured_message(content)
            if message is None and kind is SubmissionErrorKind.UNKNOWN:
                message = f"Server Error ({response.status_code})"
            raise SubmissionError(message, kind, response.status_code)

        if not content:
            raise SubmissionError("The server returned an empty response.",
                                  SubmissionErrorKind.UNKNOWN, response.status_code)

        return self._read_success(route, payload["deck_name"], response, content)

    def _read_success(self, route: Route, deck_name: str, response, content: bytes) -> SubmissionOutcome:
        """Accept either a binary deck or a JSON body with a success flag and locator."""
        data = None
        if _is_json(response) or content[:1] in (b"{", b"["):
            try:
                data = json.loads(content.decode("utf-8"))
            except (ValueError, UnicodeDecodeError):
                data = None

        if data is None:
            return SubmissionOutcome(success=True, deck_name=deck_name, artifact=content, route=route.name)

        if isinstance(data, dict) and data.get("success"):
            locator = next((data[key] for key in LOCATOR_KEYS if data.get(key)), None)
            return SubmissionOutcome(success=True, deck_name=deck_name, download_url=locator, route=route.name)

        message = _structured_message(content) or SUBMISSION_MESSAGES[SubmissionErrorKind.UNKNOWN]
        raise SubmissionError(message, SubmissionErrorKind.UNKNOWN, response.status_code)


def _sanitize_filename(text: str) -> str:
    """Sanitize text for use as a filename."""
    sanitized = text.strip()
    sanitized = ''.join(c if c.isalnum() or c in ' ._-' else '_' for c in sanitized)
    return sanitized


def save_artifact(outcome: SubmissionOutcome, output_dir) -> Path:
    """Write the .apkg artifact of a successful submission to ``output_dir``."""
    if not outcome.artifact:
        raise ValueError("Submission outcome carries no artifact to save")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    output_path = output_dir / _sanitize_filename(outcome.filename)
    with open(output_path, "wb") as artifact_file:
        artifact_file.write(outcome.artifact)

    logger.info("Deck saved to %s", output_path)
    return output_path


def create_submission_client(config: Configuration) -> SubmissionClient:
    """Factory function to create submission client from configuration."""
    routes = build_routes(config.backend_url, config.relay_routes, config.use_direct_route)
    return SubmissionClient(routes, timeout=config.request_timeout)
