"""
Tests for the submission client.
"""

import pytest
import requests

from card_creator.errors import SubmissionError, SubmissionErrorKind
from card_creator.structures import Configuration, Entry, SubmissionOutcome
from card_creator.submission import (
    Route, SubmissionClient, build_payload, build_routes, classify_status,
    create_submission_client, save_artifact
)

ROUTES = [Route("A", "https://a.example/deck"), Route("B", "https://b.example/deck"),
          Route("C", "https://c.example/deck")]

ENTRIES = [Entry.vocabulary("casa", "house"), Entry.vocabulary("perro", "dog")]


class TestBuildPayload:
    """Test payload construction."""

    def test_last_write_wins_on_duplicate_translation(self):
        """Test that the last duplicate translation wins."""
        entries = [Entry(original="Hund", translated="dog"), Entry(original="Katze", translated="dog")]

        payload = build_payload(entries, "Animals")

        assert payload.vocabulary == {"dog": "Katze"}

    def test_empty_deck_name_defaults(self):
        """Test the default deck name."""
        assert build_payload(ENTRIES, "").deck_name == "Default Deck"
        assert build_payload(ENTRIES, "   ").deck_name == "Default Deck"
        assert build_payload(ENTRIES, None).deck_name == "Default Deck"

    def test_fields_are_trimmed(self):
        """Test that fields are trimmed."""
        payload = build_payload([Entry(original=" casa ", translated=" house ")], "Spanish")

        assert payload.to_dict() == {"deck_name": "Spanish", "vocabulary": {"house": "casa"}}

    def test_qa_entries_map_question_to_answer(self):
        """Test mapping Q&A entries."""
        payload = build_payload([Entry.qa("Wo liegt Paris?", "In Frankreich")], "Geo")

        assert payload.vocabulary == {"Wo liegt Paris?": "In Frankreich"}


class TestBuildRoutes:
    """Test route list construction."""

    def test_direct_then_relays(self):
        """Test route order with the direct route."""
        routes = build_routes("https://backend.example/api/convert", ["https://relay.example/?url="])

        assert routes[0] == Route("direct", "https://backend.example/api/convert")
        assert routes[1].url == "https://relay.example/?url=https%3A%2F%2Fbackend.example%2Fapi%2Fconvert"

    def test_without_direct(self):
        """Test route order without the direct route."""
        routes = build_routes("https://backend.example", ["https://r1/", "https://r2/"], include_direct=False)

        assert [route.name for route in routes] == ["https://r1/", "https://r2/"]


class TestClassifyStatus:
    """Test HTTP status classification."""

    @pytest.mark.parametrize("status,kind", [
        (400, SubmissionErrorKind.BAD_REQUEST),
        (413, SubmissionErrorKind.TOO_LARGE),
        (429, SubmissionErrorKind.RATE_LIMITED),
        (500, SubmissionErrorKind.SERVER_ERROR),
        (503, SubmissionErrorKind.SERVER_ERROR),
        (404, SubmissionErrorKind.UNKNOWN),
    ])
    def test_classify(self, status, kind):
        """Test classifying status codes."""
        assert classify_status(status) == kind


class TestSubmissionClient:
    """Test route fallback and error classification."""

    def test_falls_through_to_first_working_route(self, fake_session, response_factory):
        """Test falling through to a working route."""
        session = fake_session([
            requests.exceptions.ConnectionError("blocked"),
            requests.exceptions.ConnectionError("blocked"),
            response_factory(200, b"APKG-BYTES", "application/octet-stream"),
        ])
        client = SubmissionClient(ROUTES, session=session)

        outcome = client.submit(ENTRIES, "Spanish")

        assert outcome.success is True
        assert outcome.artifact == b"APKG-BYTES"
        assert outcome.route == "C"
        assert [url for url, _ in session.calls] == [route.url for route in ROUTES]

    def test_payload_is_built_once_and_reused(self, fake_session, response_factory):
        """Test that the payload is reused across routes."""
        session = fake_session([
            requests.exceptions.Timeout("slow"),
            response_factory(200, b"APKG", "application/octet-stream"),
        ])
        client = SubmissionClient(ROUTES[:2], timeout=12, session=session)

        client.submit(ENTRIES, "")

        first, second = (kwargs for _, kwargs in session.calls)
        assert first["json"] is second["json"]
        assert first["json"] == {"deck_name": "Default Deck", "vocabulary": {"house": "casa", "dog": "perro"}}
        assert first["timeout"] == 12
        assert first["headers"]["X-Requested-With"] == "XMLHttpRequest"

    def test_stops_after_first_success(self, fake_session, response_factory):
        """Test stopping after the first success."""
        session = fake_session([response_factory(200, b"APKG", "application/octet-stream")])
        client = SubmissionClient(ROUTES, session=session)

        client.submit(ENTRIES, "Deck")

        assert len(session.calls) == 1

    def test_all_routes_fail_last_rate_limited(self, fake_session, response_factory):
        """Test the error when every route fails."""
        session = fake_session([
            requests.exceptions.ConnectionError("blocked"),
            response_factory(500, b"oops", "text/plain"),
            response_factory(429, b"", "text/plain"),
        ])
        client = SubmissionClient(ROUTES, session=session)

        with pytest.raises(SubmissionError) as excinfo:
            client.submit(ENTRIES, "Deck")

        assert excinfo.value.kind == SubmissionErrorKind.RATE_LIMITED
        assert excinfo.value.status_code == 429
        assert excinfo.value.message == "Too many requests. Please wait and try again."

    @pytest.mark.parametrize("failure,kind", [
        (requests.exceptions.Timeout("slow"), SubmissionErrorKind.TIMEOUT),
        (requests.exceptions.ConnectionError("down"), SubmissionErrorKind.NETWORK_UNREACHABLE),
        (requests.exceptions.InvalidURL("bad"), SubmissionErrorKind.UNKNOWN),
    ])
    def test_transport_failures(self, fake_session, failure, kind):
        """Test timeouts and connection failures."""
        client = SubmissionClient(ROUTES[:1], session=fake_session([failure]))

        with pytest.raises(SubmissionError) as excinfo:
            client.submit(ENTRIES, "Deck")

        assert excinfo.value.kind == kind

    def test_structured_error_body_takes_precedence(self, fake_session, response_factory):
        """Test that a structured error body wins."""
        session = fake_session([response_factory(400, json_body={"error": "Vocabulary must not be empty"})])
        client = SubmissionClient(ROUTES[:1], session=session)

        with pytest.raises(SubmissionError) as excinfo:
            client.submit(ENTRIES, "Deck")

        assert excinfo.value.kind == SubmissionErrorKind.BAD_REQUEST
        assert excinfo.value.message == "Vocabulary must not be empty"

    def test_unknown_status_message(self, fake_session, response_factory):
        """Test the message for an unknown status."""
        session = fake_session([response_factory(404, b"", "text/html")])
        client = SubmissionClient(ROUTES[:1], session=session)

        with pytest.raises(SubmissionError) as excinfo:
            client.submit(ENTRIES, "Deck")

        assert excinfo.value.kind == SubmissionErrorKind.UNKNOWN
        assert excinfo.value.message == "Server Error (404)"

    def test_empty_success_body_tries_next_route(self, fake_session, response_factory):
        """Test that an empty body tries the next route."""
        session = fake_session([
            response_factory(200, b"", "application/octet-stream"),
            response_factory(200, b"APKG", "application/octet-stream"),
        ])
        client = SubmissionClient(ROUTES[:2], session=session)

        outcome = client.submit(ENTRIES, "Deck")

        assert outcome.route == "B"

    def test_json_success_with_locator(self, fake_session, response_factory):
        """Test a JSON reply with a download locator."""
        session = fake_session([
            response_factory(200, json_body={"success": True, "download_url": "https://backend/decks/1.apkg"}),
        ])
        client = SubmissionClient(ROUTES[:1], session=session)

        outcome = client.submit(ENTRIES, "Deck")

        assert outcome.success is True
        assert outcome.artifact is None
        assert outcome.download_url == "https://backend/decks/1.apkg"

    def test_json_without_success_flag_is_failure(self, fake_session, response_factory):
        """Test a JSON reply without a success flag."""
        session = fake_session([response_factory(200, json_body={"success": False, "error": "conversion failed"})])
        client = SubmissionClient(ROUTES[:1], session=session)

        with pytest.raises(SubmissionError) as excinfo:
            client.submit(ENTRIES, "Deck")

        assert excinfo.value.message == "conversion failed"

    def test_requires_routes(self):
        """Test that routes are required."""
        with pytest.raises(ValueError):
            SubmissionClient([])


class TestSaveArtifact:
    """Test writing the downloaded deck."""

    def test_save_artifact(self, tmp_path):
        """Test saving the artifact."""
        outcome = SubmissionOutcome(success=True, deck_name="Spanish Basics", artifact=b"APKG")

        path = save_artifact(outcome, tmp_path / "decks")

        assert path == tmp_path / "decks" / "Spanish Basics.apkg"
        assert path.read_bytes() == b"APKG"

    def test_unsafe_characters_replaced(self, tmp_path):
        """Test that unsafe characters are replaced."""
        outcome = SubmissionOutcome(success=True, deck_name="a/b", artifact=b"APKG")

        assert save_artifact(outcome, tmp_path).name == "a_b.apkg"

    def test_no_artifact(self, tmp_path):
        """Test saving without an artifact."""
        outcome = SubmissionOutcome(success=True, deck_name="x", download_url="https://x")

        with pytest.raises(ValueError):
            save_artifact(outcome, tmp_path)


def test_create_submission_client():
    """Test the submission client factory."""
    config = Configuration(backend_url="https://backend.example", relay_routes=["https://relay/?"],
                           request_timeout=5)

    client = create_submission_client(config)

    assert [route.name for route in client.routes] == ["direct", "https://relay/?"]
    assert client.timeout == 5
