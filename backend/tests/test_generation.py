import asyncio

import pytest
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.messages import ModelResponse, TextPart
from pydantic_ai.models.function import FunctionModel

from companion.core.constants import MSG_CONNECTION_TROUBLE, MSG_RATE_LIMITED, MSG_REPHRASE
from companion.core.errors import GenerationError
from companion.services.generation import GenerationClient


def _http_error(status: int) -> ModelHTTPError:
    return ModelHTTPError(status_code=status, model_name="scripted", body=None)


@pytest.mark.asyncio
async def test_generate_returns_text(generator, scripted):
    scripted.queue.append("Hello friend")
    assert await generator.generate("prompt text") == "Hello friend"
    assert scripted.prompts == ["prompt text"]


@pytest.mark.asyncio
async def test_transient_failures_are_retried(generator, scripted):
    scripted.queue.extend([_http_error(503), RuntimeError("connection reset"), "finally"])
    assert await generator.generate("p", max_retries=2) == "finally"
    assert scripted.calls == 3


@pytest.mark.asyncio
async def test_gives_up_after_max_retries(generator, scripted):
    scripted.queue.extend([_http_error(500)] * 5)
    with pytest.raises(GenerationError) as exc_info:
        await generator.generate("p", max_retries=2)
    assert scripted.calls == 3
    assert exc_info.value.status == 500
    assert exc_info.value.attempts == 3


@pytest.mark.asyncio
async def test_zero_retries_means_single_attempt(generator, scripted):
    scripted.queue.extend([_http_error(502), "never reached"])
    with pytest.raises(GenerationError):
        await generator.generate("p", max_retries=0)
    assert scripted.calls == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 401, 403, 404])
async def test_client_errors_are_not_retried(generator, scripted, status):
    scripted.queue.extend([_http_error(status), "never reached"])
    with pytest.raises(GenerationError) as exc_info:
        await generator.generate("p")
    assert scripted.calls == 1
    assert exc_info.value.status == status


@pytest.mark.asyncio
async def test_rate_limit_is_retried(generator, scripted):
    scripted.queue.extend([_http_error(429), "ok now"])
    assert await generator.generate("p") == "ok now"
    assert scripted.calls == 2


@pytest.mark.asyncio
async def test_respond_apologizes_for_rate_limit(generator, scripted):
    scripted.queue.extend([_http_error(429)] * 3)
    assert await generator.respond("p") == MSG_RATE_LIMITED


@pytest.mark.asyncio
async def test_respond_asks_to_rephrase_on_rejection(generator, scripted):
    scripted.queue.append(_http_error(400))
    assert await generator.respond("p") == MSG_REPHRASE


@pytest.mark.asyncio
async def test_respond_reports_connection_trouble(generator, scripted):
    scripted.queue.extend([RuntimeError("boom")] * 3)
    assert await generator.respond("p") == MSG_CONNECTION_TROUBLE


@pytest.mark.asyncio
async def test_slow_provider_times_out_and_counts_as_transient():
    calls = []

    async def slow(messages, info):
        calls.append(1)
        await asyncio.sleep(1)
        return ModelResponse(parts=[TextPart(content="too late")])

    client = GenerationClient(FunctionModel(slow), max_retries=1, retry_delay=0, timeout=0.05)
    with pytest.raises(GenerationError) as exc_info:
        await client.generate("p")
    assert len(calls) == 2
    assert exc_info.value.status is None
    assert await client.respond("p") == MSG_CONNECTION_TROUBLE
