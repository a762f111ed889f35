from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from app.api import chat, health
from app.core.dependencies import get_settings
from app.core.logging import configure_logging

load_dotenv()
settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting web-chat on port %s", settings.port)
    logger.info(
        "Chat completions via %s (model=%s, timeout=%ss)",
        settings.openai_url,
        settings.openai_model,
        settings.openai_timeout_seconds,
    )
    if not settings.openai_token:
        logger.warning("OPENAI_TOKEN is not set; chat submissions will fail")
    yield


app = FastAPI(title="web-chat", version="1.0.0", lifespan=lifespan)
app.include_router(health.router)
app.include_router(chat.router)
