from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from pydantic import ValidationError

from app.schemas.chat import EMPTY_CHAT_MESSAGE, FORM_WHITESPACE, ChatForm, ChatRequest


@dataclass(frozen=True)
class Valid:
    input: str

    def to_form(self) -> ChatForm:
        return ChatForm(valid=True, data={"input": self.input})


@dataclass(frozen=True)
class Invalid:
    field_errors: dict[str, list[str]]
    data: dict[str, str] = field(default_factory=dict)

    @property
    def message(self) -> str:
        for messages in self.field_errors.values():
            if messages:
                return messages[0]
        return EMPTY_CHAT_MESSAGE

    def to_form(self) -> ChatForm:
        return ChatForm(valid=False, data=dict(self.data), errors=dict(self.field_errors))


ValidationResult = Valid | Invalid


class InputValidator:
    def __init__(self, trim_input: bool = False) -> None:
        self._trim_input = trim_input

    def validate(self, form: Mapping[str, object]) -> ValidationResult:
        """Check the ``input`` field of a raw form submission.

        Absent, empty and whitespace-only values are rejected with the same
        message. With ``trim_input`` the accepted value is stored stripped,
        otherwise the submitted string is kept as is.
        """
        raw = form.get("input")
        if isinstance(raw, str) and self._trim_input:
            raw = raw.strip(FORM_WHITESPACE)
        payload = {} if raw is None else {"input": raw}
        try:
            request = ChatRequest.model_validate(payload)
        except ValidationError as exc:
            data = {"input": raw} if isinstance(raw, str) else {"input": ""}
            return Invalid(field_errors=_field_errors(exc), data=data)
        return Valid(input=request.input)


def _field_errors(exc: ValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = error.get("loc") or ("input",)
        name = str(loc[0])
        errors.setdefault(name, []).append(_error_message(error))
    return errors


def _error_message(error: Mapping[str, object]) -> str:
    error_type = error.get("type")
    if error_type == "missing":
        return EMPTY_CHAT_MESSAGE
    if error_type == "value_error":
        ctx = error.get("ctx")
        if isinstance(ctx, dict) and ctx.get("error") is not None:
            return str(ctx["error"])
    return str(error.get("msg") or EMPTY_CHAT_MESSAGE)
