"""
Shared fixtures: a file-backed SQLite store per test, a scripted provider model,
and a TestClient wired to both with the credential configured.
"""
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from pydantic_ai.messages import ModelMessage, ModelRequest, ModelResponse, TextPart, UserPromptPart
from pydantic_ai.models.function import AgentInfo, FunctionModel

from companion.config import settings
from companion.main import create_app
from companion.services.chat_service import ChatService
from companion.services.chat_store import ChatStore
from companion.services.generation import GenerationClient


def _last_prompt(messages: list[ModelMessage]) -> str:
    for message in reversed(messages):
        if isinstance(message, ModelRequest):
            for part in message.parts:
                if isinstance(part, UserPromptPart) and isinstance(part.content, str):
                    return part.content
    return ""


class ScriptedModel:
    """Provider stand-in: records prompts, answers from a queue (text or exception to raise)."""

    def __init__(self, default: str = "Hey! Tell me more.") -> None:
        self.default = default
        self.queue: list[str | BaseException] = []
        self.prompts: list[str] = []
        self.model = FunctionModel(self.respond)

    def respond(self, messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        self.prompts.append(_last_prompt(messages))
        reply = self.queue.pop(0) if self.queue else self.default
        if isinstance(reply, BaseException):
            raise reply
        return ModelResponse(parts=[TextPart(content=reply)])

    @property
    def calls(self) -> int:
        return len(self.prompts)


@pytest.fixture
def store(tmp_path) -> Iterator[ChatStore]:
    chat_store = ChatStore(f"sqlite:///{tmp_path / 'companion-test.db'}")
    chat_store.open()
    yield chat_store
    chat_store.close()


@pytest.fixture
def scripted() -> ScriptedModel:
    return ScriptedModel()


@pytest.fixture
def generator(scripted: ScriptedModel) -> GenerationClient:
    return GenerationClient(scripted.model, max_retries=2, retry_delay=0, timeout=5)


@pytest.fixture
def service(store: ChatStore, generator: GenerationClient) -> ChatService:
    return ChatService(store, generator)


@pytest.fixture
def configured(monkeypatch) -> None:
    monkeypatch.setattr(settings, "gemini_api_key", "test-key")


@pytest.fixture
def client(store: ChatStore, generator: GenerationClient, configured) -> Iterator[TestClient]:
    app = create_app(store=store, generator=generator)
    with TestClient(app) as test_client:
        yield test_client
