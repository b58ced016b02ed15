"""
Generation client: wraps the text-generation provider (pydantic-ai Agent, Gemini by default).

generate() retries transient failures in an explicit bounded loop and raises
GenerationError when it gives up; respond() turns that into an apology reply.
"""
import asyncio
import logging
from typing import Any

from pydantic_ai import Agent
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.models import Model

from companion.config import settings
from companion.core.errors import GenerationError, generation_error_to_reply, is_client_error

logger = logging.getLogger(__name__)


def _status_of(exc: BaseException) -> int | None:
    """HTTP status carried by a provider exception, if any."""
    if isinstance(exc, ModelHTTPError):
        return exc.status_code
    for attr in ("status_code", "status", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


class GenerationClient:
    """Provider call with timeout, fixed-delay retries and error translation."""

    def __init__(
        self,
        model: Model | str | None = None,
        *,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        timeout: float | None = None,
    ) -> None:
        self.max_retries = settings.generation_max_retries if max_retries is None else max_retries
        self.retry_delay = settings.generation_retry_delay_seconds if retry_delay is None else retry_delay
        self.timeout = settings.generation_timeout_seconds if timeout is None else timeout
        # Model resolution deferred so the app can start (and report geminiReady) without a key.
        self.agent: Agent[None, str] = Agent(model=model or settings.ai_model, defer_model_check=True)

    async def _attempt(self, prompt: str) -> str:
        result = await asyncio.wait_for(self.agent.run(prompt), timeout=self.timeout)
        output: Any = result.output
        return output if isinstance(output, str) else str(output)

    async def generate(self, prompt: str, max_retries: int | None = None) -> str:
        """Return generated text; raise GenerationError after 1 + max_retries failed attempts."""
        if max_retries is None:
            max_retries = self.max_retries
        attempts = max(0, max_retries) + 1
        last_error: GenerationError | None = None
        for attempt in range(1, attempts + 1):
            try:
                return await self._attempt(prompt)
            except asyncio.TimeoutError:
                last_error = GenerationError(
                    f"Generation timed out after {self.timeout}s", attempts=attempt
                )
            except Exception as e:  # noqa: BLE001 - provider SDKs raise assorted types
                status = _status_of(e)
                last_error = GenerationError(str(e), status=status, attempts=attempt)
                if is_client_error(status):
                    logger.warning("Generation rejected (status %s), not retrying: %s", status, e)
                    raise last_error from e
            if attempt < attempts:
                logger.warning(
                    "Generation attempt %s/%s failed: %s; retrying in %ss",
                    attempt,
                    attempts,
                    last_error.detail,
                    self.retry_delay,
                )
                await asyncio.sleep(self.retry_delay)
        assert last_error is not None
        logger.error("Generation failed after %s attempts: %s", attempts, last_error.detail)
        raise last_error

    async def respond(self, prompt: str, max_retries: int | None = None) -> str:
        """Like generate(), but a failure becomes a user-facing apology instead of an error."""
        try:
            return await self.generate(prompt, max_retries)
        except GenerationError as e:
            return generation_error_to_reply(e)
