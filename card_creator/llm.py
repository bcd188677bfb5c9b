"""
Model gateway for talking to the generative-language service.
Sends a prompt plus an optional image and returns the raw reply text.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence, Tuple, Union

import groq
import requests

from card_creator.errors import GatewayError, GatewayErrorKind
from card_creator.structures import Configuration, EncodedImage

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Failed to get a response from the model."
EMPTY_FAILURE = "No response from the model."


class ModelGateway(ABC):
    """Abstract base class for model gateways."""

    @abstractmethod
    def invoke(self, prompt: str, image: Optional[EncodedImage] = None) -> str:
        """Send one prompt and return the model's text reply."""
        pass


class GeminiModelGateway(ModelGateway):
    """Gemini ``generateContent`` implementation over plain HTTPS."""

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash-exp",
                 base_url: str = "https://generativelanguage.googleapis.com/v1beta",
                 timeout: float = 30.0, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.api_endpoint = f"{base_url.rstrip('/')}/models/{model}:generateContent"
        self.session = session or requests.Session()

    def invoke(self, prompt: str, image: Optional[EncodedImage] = None) -> str:
        """Send the prompt to Gemini and extract the first candidate's text."""
        body = {"contents": [{"parts": self._build_parts(prompt, image)}]}
        logger.debug("Calling %s (image: %s)", self.model, image is not None)

        try:
            response = self.session.post(
                self.api_endpoint,
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
                json=body,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise GatewayError("The model request timed out.", GatewayErrorKind.TIMEOUT) from e
        except requests.exceptions.RequestException as e:
            raise GatewayError(GENERIC_FAILURE, GatewayErrorKind.NETWORK) from e

        data = self._decode_json(response)

        if not 200 <= response.status_code < 300:
            message = self._extract_error_message(data) or GENERIC_FAILURE
            logger.warning("Model returned HTTP %s: %s", response.status_code, message)
            raise GatewayError(message, GatewayErrorKind.HTTP_STATUS, response.status_code)

        text = self._extract_text(data)
        if not text:
            message = self._extract_error_message(data) or EMPTY_FAILURE
            raise GatewayError(message, GatewayErrorKind.EMPTY_RESPONSE, response.status_code)

        return text

    def _build_parts(self, prompt: str, image: Optional[EncodedImage]) -> List[dict]:
        parts = [{"text": prompt}]
        if image is not None:
            parts.append({
                "inlineData": {
                    "mimeType": image.mime_type,
                    "data": image.data,
                }
            })
        return parts

    @staticmethod
    def _decode_json(response) -> Optional[dict]:
        try:
            data = response.json()
        except ValueError:
            return None
        return data if isinstance(data, dict) else None

    @staticmethod
    def _extract_error_message(data: Optional[dict]) -> Optional[str]:
        if not data:
            return None
        error = data.get("error")
        if isinstance(error, dict):
            return error.get("message")
        if isinstance(error, str):
            return error
        return None

    @staticmethod
    def _extract_text(data: Optional[dict]) -> Optional[str]:
        """Follow ``candidates[0].content.parts[0].text``."""
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None


class GroqModelGateway(ModelGateway):
    """Groq chat-completions implementation."""

    def __init__(self, api_key: str, model: str = "meta-llama/llama-4-maverick-17b-128e-instruct",
                 timeout: float = 30.0, client=None):
        self.model = model
        self.client = client or groq.Client(api_key=api_key, timeout=timeout, max_retries=0)

    def invoke(self, prompt: str, image: Optional[EncodedImage] = None) -> str:
        """Send the prompt as a single user message."""
        content: Union[str, List[dict]] = prompt
        if image is not None:
            content = [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": f"data:{image.mime_type};base64,{image.data}"}},
            ]

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": content}],
                temperature=0.3,
            )
        except groq.APITimeoutError as e:
            raise GatewayError("The model request timed out.", GatewayErrorKind.TIMEOUT) from e
        except groq.APIConnectionError as e:
            raise GatewayError(GENERIC_FAILURE, GatewayErrorKind.NETWORK) from e
        except groq.APIStatusError as e:
            logger.warning("Groq returned HTTP %s", e.status_code)
            raise GatewayError(self._status_message(e), GatewayErrorKind.HTTP_STATUS, e.status_code) from e
        except groq.APIError as e:
            logger.warning("Groq call failed: %s", e)
            raise GatewayError(GENERIC_FAILURE, GatewayErrorKind.NETWORK) from e

        try:
            text = response.choices[0].message.content
        except (AttributeError, IndexError):
            text = None
        if not text:
            raise GatewayError(EMPTY_FAILURE, GatewayErrorKind.EMPTY_RESPONSE)
        return text

    @staticmethod
    def _status_message(error) -> str:
        body = getattr(error, "body", None)
        if isinstance(body, dict):
            detail = body.get("error", body)
            if isinstance(detail, dict) and detail.get("message"):
                return detail["message"]
        return GENERIC_FAILURE


class MockModelGateway(ModelGateway):
    """Mock gateway returning scripted replies, for testing and dry runs."""

    def __init__(self, replies: Union[Sequence[Union[str, Exception]], Callable[[str, Optional[EncodedImage]], str]] = ()):
        self.replies = replies if callable(replies) else list(replies)
        self.calls: List[Tuple[str, Optional[EncodedImage]]] = []

    def invoke(self, prompt: str, image: Optional[EncodedImage] = None) -> str:
        """Return the next scripted reply or raise it if it is an exception."""
        self.calls.append((prompt, image))
        if callable(self.replies):
            return self.replies(prompt, image)
        if not self.replies:
            raise GatewayError(EMPTY_FAILURE, GatewayErrorKind.EMPTY_RESPONSE)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def create_model_gateway(config: Configuration) -> ModelGateway:
    """Factory function to create the configured model gateway."""
    if config.llm_provider == "groq":
        return GroqModelGateway(config.groq_api_key, config.groq_model, config.request_timeout)
    return GeminiModelGateway(
        config.gemini_api_key,
        model=config.gemini_model,
        base_url=config.gemini_base_url,
        timeout=config.request_timeout,
    )
