from __future__ import annotations

from functools import lru_cache

from app.clients.openai_chat import CompletionGateway
from app.core.config import Settings, load_settings
from app.core.masking import RegexMasker, build_masker
from app.services.chat import ChatService
from app.services.validation import InputValidator


@lru_cache
def get_settings() -> Settings:
    return load_settings()


@lru_cache
def get_masker() -> RegexMasker:
    settings = get_settings()
    return build_masker(settings.masking_regex_list, secrets=[settings.openai_token])


@lru_cache
def get_input_validator() -> InputValidator:
    return InputValidator(trim_input=get_settings().chat_trim_input)


@lru_cache
def get_completion_gateway() -> CompletionGateway:
    return CompletionGateway(get_settings(), get_masker())


@lru_cache
def get_chat_service() -> ChatService:
    return ChatService(get_input_validator(), get_completion_gateway)
