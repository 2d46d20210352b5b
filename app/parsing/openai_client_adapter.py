import httpx
import openai

from app.logging.logger import Log
from app.parsing.client_base import BaseParserClient, CompletionRequest
from app.parsing.exceptions import (
    MalformedResponseError,
    ParserNetworkError,
    ParserRequestRejectedError,
)


class OpenAIClientAdapter(BaseParserClient):
    """Structured-output client for OpenAI and every provider speaking its API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
        max_retries: int = 1,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=max_retries,
        )

    def complete(self, request: CompletionRequest) -> str:
        try:
            response = self._client.chat.completions.create(
                model=request.model,
                temperature=request.temperature,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": request.schema_name,
                        "strict": True,
                        "schema": request.json_schema,
                    },
                },
                messages=[
                    {"role": "system", "content": request.system_prompt},
                    {"role": "user", "content": request.user_prompt},
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ParserNetworkError(f"AI provider network error: {exc}") from exc
        except openai.BadRequestError as exc:
            # Usually an oversized prompt or a schema the model does not support.
            raise ParserRequestRejectedError(f"AI provider rejected the request: {exc}") from exc
        except openai.APIError as exc:
            raise ParserNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise MalformedResponseError("AI returned no choices")
        choice = response.choices[0]
        if choice.finish_reason == "length":
            raise MalformedResponseError("AI response was cut off at the token limit")
        content = choice.message.content
        if not content:
            raise MalformedResponseError("AI returned empty response")

        usage = response.usage
        if usage is not None:
            Log.debug(
                f"AI usage for {request.model}: {usage.prompt_tokens} prompt, "
                f"{usage.completion_tokens} completion tokens"
            )
        return content
