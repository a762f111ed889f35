from __future__ import annotations

import json
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

import app.clients.openai_chat as openai_chat_module
from app.clients.openai_chat import CompletionGateway, CompletionResponse, UpstreamError
from app.core.config import Settings
from app.core.dependencies import get_chat_service
from app.main import app
from app.schemas.chat import EMPTY_CHAT_MESSAGE
from app.services.chat import ChatService
from app.services.validation import InputValidator


class FakeGateway:
    def __init__(self, reply: str) -> None:
        self._reply = reply
        self.prompts: list[str] = []

    def complete(self, text: str) -> CompletionResponse:
        self.prompts.append(text)
        return CompletionResponse(text=self._reply)


class FailingGateway:
    def complete(self, text: str) -> CompletionResponse:
        raise UpstreamError("chat-completion endpoint returned status 500", url="x", status_code=500)


def _unused_gateway() -> FakeGateway:
    raise AssertionError("gateway must not be used for invalid input")


@pytest.fixture
def override_service() -> Iterator[None]:
    yield
    app.dependency_overrides.clear()


def _use(service: ChatService) -> None:
    app.dependency_overrides[get_chat_service] = lambda: service


def test_page_renders_empty_transcript() -> None:
    client = TestClient(app)

    response = client.get("/")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert 'name="input"' in response.text
    assert 'class="message' not in response.text.split('<div id="transcript">', 1)[1].split(
        "</div>", 1
    )[0]


def test_submit_returns_completion(override_service: None) -> None:
    gateway = FakeGateway("4")
    _use(ChatService(InputValidator(), lambda: gateway))
    client = TestClient(app)

    response = client.post("/", data={"input": "What is 2+2?"})

    assert response.status_code == 200
    assert response.json() == {
        "response": "4",
        "form": {"valid": True, "data": {"input": "What is 2+2?"}, "errors": {}},
    }
    assert gateway.prompts == ["What is 2+2?"]


def test_submit_accepts_multipart(override_service: None) -> None:
    gateway = FakeGateway("hello")
    _use(ChatService(InputValidator(), lambda: gateway))
    client = TestClient(app)

    response = client.post("/", files={"input": (None, "hi")})

    assert response.status_code == 200
    assert response.json()["response"] == "hello"


@pytest.mark.parametrize("data", [{}, {"input": ""}, {"input": "   "}])
def test_submit_rejects_empty_input(override_service: None, data: dict[str, str]) -> None:
    _use(ChatService(InputValidator(), _unused_gateway))
    client = TestClient(app)

    response = client.post("/", data=data)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == EMPTY_CHAT_MESSAGE
    assert body["form"]["valid"] is False
    assert body["form"]["errors"] == {"input": [EMPTY_CHAT_MESSAGE]}


def test_submit_trims_when_configured(override_service: None) -> None:
    gateway = FakeGateway("ok")
    _use(ChatService(InputValidator(trim_input=True), lambda: gateway))
    client = TestClient(app)

    response = client.post("/", data={"input": "  hi  "})

    assert response.status_code == 200
    assert response.json()["form"]["data"] == {"input": "hi"}
    assert gateway.prompts == ["hi"]


def test_submit_propagates_upstream_failure(override_service: None) -> None:
    _use(ChatService(InputValidator(), FailingGateway))
    client = TestClient(app, raise_server_exceptions=False)

    response = client.post("/", data={"input": "hi"})

    assert response.status_code == 500


def test_submit_raises_upstream_error_to_caller(override_service: None) -> None:
    _use(ChatService(InputValidator(), FailingGateway))
    client = TestClient(app)

    with pytest.raises(UpstreamError):
        client.post("/", data={"input": "hi"})


def test_health_endpoints() -> None:
    client = TestClient(app)

    assert client.get("/ping").json() == {"message": "pong"}
    assert client.get("/healthz").json() == {"status": "ok"}


def test_submit_end_to_end_through_gateway(
    override_service: None, monkeypatch: pytest.MonkeyPatch
) -> None:
    captured: dict[str, object] = {}

    class _Response:
        status = 200

        def read(self) -> bytes:
            return b'{"choices": [{"message": {"role": "assistant", "content": "4"}}]}'

        def __enter__(self) -> _Response:
            return self

        def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[no-untyped-def]
            return None

    def fake_urlopen(request, timeout=0):  # type: ignore[no-untyped-def]
        captured["url"] = request.full_url
        captured["body"] = json.loads(request.data.decode("utf-8"))
        return _Response()

    monkeypatch.setattr(openai_chat_module.urllib.request, "urlopen", fake_urlopen)
    settings = Settings(
        port=8000,
        log_level="info",
        openai_url="https://example.test/x",
        openai_token="sk-test",
        openai_model="gpt-3.5-turbo",
        openai_timeout_seconds=30.0,
        chat_trim_input=False,
    )
    _use(ChatService(InputValidator(), lambda: CompletionGateway(settings)))
    client = TestClient(app)

    response = client.post("/", data={"input": "What is 2+2?"})

    assert response.status_code == 200
    assert response.json()["response"] == "4"
    assert captured["url"] == "https://example.test/x"
    assert captured["body"] == {
        "model": "gpt-3.5-turbo",
        "messages": [{"role": "user", "content": "What is 2+2?"}],
    }
