import json
import logging
from typing import Any, Optional

from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError
from tenacity import AsyncRetrying, before_sleep_log, retry_if_exception, stop_after_attempt, wait_exponential

from ..config import (
    ANALYSIS_MAX_ATTEMPTS,
    ANALYSIS_MAX_TOKENS,
    ANALYSIS_MODEL,
    ANALYSIS_RETRY_MAX_SECONDS,
    ANALYSIS_RETRY_MIN_SECONDS,
    ANALYSIS_TEMPERATURE,
    OPENAI_API_KEY,
    OPENAI_BASE_URL,
)

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = (429, 500, 502, 503, 504)
FAIL_FAST_STATUS_CODES = (400, 401, 403)

_RETRYABLE_NAMES = {"RateLimitError", "APIConnectionError", "APITimeoutError", "InternalServerError"}
_FAIL_FAST_NAMES = {"AuthenticationError", "PermissionDeniedError", "BadRequestError"}


class AnalysisResponseError(Exception):
    """The collaborator answered, but not with a usable JSON object."""


def is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, AnalysisResponseError):
        return True
    names = {cls.__name__ for cls in type(exc).__mro__}
    if names & _FAIL_FAST_NAMES:
        return False
    status = getattr(exc, "status_code", None)
    if status in FAIL_FAST_STATUS_CODES:
        return False
    if names & _RETRYABLE_NAMES:
        return True
    return status in RETRYABLE_STATUS_CODES


def parse_json_object(content: Optional[str]) -> dict[str, Any]:
    if not content or not content.strip():
        raise AnalysisResponseError("empty response")
    text = content.strip()
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise AnalysisResponseError(f"response is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise AnalysisResponseError("response is not a JSON object")
    return data


class OpenAIAnalysisClient:
    def __init__(
        self,
        *,
        model: str = ANALYSIS_MODEL,
        temperature: float = ANALYSIS_TEMPERATURE,
        max_tokens: int = ANALYSIS_MAX_TOKENS,
        max_attempts: int = ANALYSIS_MAX_ATTEMPTS,
        wait=None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_attempts = max_attempts
        self.wait = wait or wait_exponential(multiplier=1, min=ANALYSIS_RETRY_MIN_SECONDS, max=ANALYSIS_RETRY_MAX_SECONDS)
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=OPENAI_API_KEY or None, base_url=OPENAI_BASE_URL or None)
        return self._client

    async def complete_json(self, system_prompt: str, user_content: str, schema: Optional[type[BaseModel]] = None) -> Any:
        """One JSON completion, retried on transient failures and on unusable output.

        With ``schema`` the parsed object is validated into that model.
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.wait,
            retry=retry_if_exception(is_retryable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self._complete_once(system_prompt, user_content, schema)
        raise AnalysisResponseError("no attempt was made")

    async def _complete_once(self, system_prompt: str, user_content: str, schema: Optional[type[BaseModel]]) -> Any:
        response = await self.client.chat.completions.create(
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
        )
        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.info("[llm] model=%s prompt_tokens=%s completion_tokens=%s", self.model, usage.prompt_tokens, usage.completion_tokens)
        content = response.choices[0].message.content if response.choices else None
        data = parse_json_object(content)
        if schema is None:
            return data
        try:
            return schema.model_validate(data)
        except ValidationError as exc:
            raise AnalysisResponseError(f"response failed validation: {exc}") from exc
