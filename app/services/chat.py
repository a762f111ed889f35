from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Protocol

from app.clients.openai_chat import CompletionResponse
from app.services.validation import InputValidator, Invalid, Valid, ValidationResult

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    def complete(self, text: str) -> CompletionResponse:
        raise NotImplementedError


class ChatService:
    def __init__(
        self,
        validator: InputValidator,
        gateway_provider: Callable[[], CompletionClient],
    ) -> None:
        self._logger = logger
        self._validator = validator
        # Resolved per valid submission; a missing token only fails completions.
        self._gateway_provider = gateway_provider

    def validate(self, form: Mapping[str, object]) -> ValidationResult:
        result = self._validator.validate(form)
        if isinstance(result, Invalid):
            self._logger.debug("Rejected chat submission: %s", result.field_errors)
        return result

    def reply(self, request: Valid) -> str:
        """Forward a validated submission upstream. Upstream failures propagate."""
        gateway = self._gateway_provider()
        completion = gateway.complete(request.input)
        return completion.text
