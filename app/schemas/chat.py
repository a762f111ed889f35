from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMPTY_CHAT_MESSAGE = "Chat is empty"

# Characters removed by a browser-side String.prototype.trim(): tab, line and
# paragraph separators, BOM and the Unicode space separators (Zs).
FORM_WHITESPACE = (
    "\t\n\v\f\r \u00a0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)


class ChatRequest(BaseModel):
    """A single chat form submission."""

    input: str

    model_config = ConfigDict(frozen=True)

    @field_validator("input")
    @classmethod
    def _require_text(cls, value: str) -> str:
        if not value.strip(FORM_WHITESPACE):
            raise ValueError(EMPTY_CHAT_MESSAGE)
        return value


class ChatForm(BaseModel):
    """Form state returned to the page so it can redisplay the submission."""

    valid: bool
    data: dict[str, str] = Field(default_factory=dict)
    errors: dict[str, list[str]] = Field(default_factory=dict)


class ChatResponse(BaseModel):
    response: str
    form: ChatForm


class ChatFailure(BaseModel):
    error: str
    form: ChatForm


class ChatMessage(BaseModel):
    role: Literal["user", "bot"]
    message: str


class CompletionMessage(BaseModel):
    content: str


class CompletionChoice(BaseModel):
    message: CompletionMessage


class CompletionPayload(BaseModel):
    """Subset of the chat-completion response body that we read."""

    choices: list[CompletionChoice] = Field(min_length=1)
