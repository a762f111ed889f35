from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass

from pydantic import ValidationError

from app.core.config import Settings
from app.core.masking import RegexMasker
from app.schemas.chat import CompletionPayload

_ERROR_BODY_LIMIT = 300


class UpstreamError(RuntimeError):
    """Raised when the chat-completion endpoint cannot produce a reply."""

    def __init__(self, message: str, *, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


@dataclass(frozen=True)
class CompletionResponse:
    text: str

    @classmethod
    def from_payload(cls, payload: object, *, url: str) -> CompletionResponse:
        try:
            decoded = CompletionPayload.model_validate(payload)
        except ValidationError as exc:
            raise UpstreamError(
                f"unexpected chat-completion payload: {exc.error_count()} error(s)",
                url=url,
            ) from exc
        return cls(text=decoded.choices[0].message.content)


class CompletionGateway:
    def __init__(self, settings: Settings, masker: RegexMasker | None = None) -> None:
        if not settings.openai_token:
            raise ValueError("OPENAI_TOKEN is required for chat completions")
        self._logger = logging.getLogger(__name__)
        self._url = settings.openai_url
        self._token = settings.openai_token
        self._model = settings.openai_model
        self._timeout_seconds = settings.openai_timeout_seconds
        self._masker = masker or RegexMasker(secrets=(settings.openai_token,))

    def build_body(self, text: str) -> dict[str, object]:
        return {
            "model": self._model,
            "messages": [{"role": "user", "content": text}],
        }

    def complete(self, text: str) -> CompletionResponse:
        """Send ``text`` as a single user message and return the first choice.

        Raises:
            UpstreamError: on network failure, timeout, non-2xx status,
                undecodable JSON or a payload without ``choices[0].message.content``.
        """
        body = json.dumps(self.build_body(text)).encode("utf-8")
        request = urllib.request.Request(
            self._url,
            data=body,
            method="POST",
            headers={
                "Authorization": f"Bearer {self._token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )
        self._logger.debug("POST %s (model=%s)", self._url, self._model)
        try:
            with urllib.request.urlopen(request, timeout=self._timeout_seconds) as response:
                status = response.status
                raw = response.read()
        except urllib.error.HTTPError as exc:
            detail = self._masker.mask_text(exc.read().decode("utf-8", errors="replace"))
            self._logger.warning(
                "Chat completion HTTP error %s for %s: %s",
                exc.code,
                self._url,
                detail[:_ERROR_BODY_LIMIT],
            )
            raise UpstreamError(
                f"chat-completion endpoint returned status {exc.code}",
                url=self._url,
                status_code=exc.code,
            ) from exc
        except (OSError, http.client.HTTPException) as exc:  # URLError, timeouts, bad reads
            reason = self._masker.mask_text(str(exc))
            self._logger.warning("Chat completion request to %s failed: %s", self._url, reason)
            raise UpstreamError(
                f"chat-completion request failed: {reason}", url=self._url
            ) from exc

        if status < 200 or status >= 300:
            self._logger.warning("Chat completion returned status %s for %s", status, self._url)
            raise UpstreamError(
                f"chat-completion endpoint returned status {status}",
                url=self._url,
                status_code=status,
            )

        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            self._logger.warning("Failed to decode chat completion response: %s", exc)
            raise UpstreamError(
                "failed to decode chat-completion response", url=self._url, status_code=status
            ) from exc

        completion = CompletionResponse.from_payload(payload, url=self._url)
        self._logger.debug("Chat completion returned %d characters", len(completion.text))
        return completion
