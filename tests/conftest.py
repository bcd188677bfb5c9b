"""
Shared fixtures: canned HTTP responses and a scripted requests session.
"""

import json

import pytest
import requests


def make_response(status_code=200, content=b"", content_type=None, json_body=None):
    """Build a real ``requests.Response`` without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    if json_body is not None:
        content = json.dumps(json_body).encode("utf-8")
        content_type = content_type or "application/json"
    response._content = content
    if content_type:
        response.headers["Content-Type"] = content_type
    return response


class FakeSession:
    """Stands in for ``requests.Session``; replays one outcome per post."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def fake_session():
    return FakeSession
