from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates

from app.core.dependencies import get_chat_service
from app.schemas.chat import ChatFailure, ChatMessage, ChatResponse
from app.services.chat import ChatService
from app.services.validation import Invalid

router = APIRouter()
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[1] / "templates"))


@router.get("/", response_class=HTMLResponse)
def chat_page(request: Request) -> HTMLResponse:
    """Render the chat page. The transcript always starts empty."""
    messages: list[ChatMessage] = []
    return templates.TemplateResponse(request, "chat.html", {"messages": messages})


@router.post(
    "/",
    response_model=ChatResponse,
    responses={400: {"model": ChatFailure}},
)
async def submit_chat(
    request: Request,
    service: ChatService = Depends(get_chat_service),  # noqa: B008
) -> ChatResponse | JSONResponse:
    """Validate the ``input`` field and return the completion for it."""
    form = await request.form()
    result = service.validate(dict(form))
    if isinstance(result, Invalid):
        failure = ChatFailure(error=result.message, form=result.to_form())
        return JSONResponse(status_code=400, content=failure.model_dump())

    reply = await run_in_threadpool(service.reply, result)
    return ChatResponse(response=reply, form=result.to_form())
