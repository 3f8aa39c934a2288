"""
Schema-constrained generation through the Anthropic Messages API.

The output schema is offered as the only tool and the model is forced to
call it, so the tool input is the structured result. No retries are made:
every SDK failure is translated once into a GatewayError subclass that
knows its HTTP status and a message that is safe to show the user.
"""
import logging
from typing import Any, Optional

import anthropic

from config import Settings, get_settings

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    status_code = 500
    user_message = "AI 처리 중 오류가 발생했습니다. 다시 시도해주세요."


class AuthFailure(GatewayError):
    status_code = 401
    user_message = "AI 서비스 인증에 실패했습니다. 관리자에게 문의해주세요."


class QuotaExceeded(GatewayError):
    status_code = 429
    user_message = "AI 서비스 사용량을 초과했습니다. 잠시 후 다시 시도해주세요."


class Timeout(GatewayError):
    status_code = 504
    user_message = "요청 시간이 초과되었습니다. 다시 시도해주세요."


class NetworkUnavailable(GatewayError):
    status_code = 503
    user_message = "네트워크 연결에 실패했습니다. 인터넷 연결을 확인해주세요."


class ModelError(GatewayError):
    pass


class MalformedRequest(GatewayError):
    status_code = 400
    user_message = "요청 데이터 형식이 올바르지 않습니다."


def translate_error(exc: anthropic.APIError) -> GatewayError:
    """Map an SDK exception onto the gateway failure taxonomy."""
    # APITimeoutError subclasses APIConnectionError, so it is checked first
    if isinstance(exc, anthropic.APITimeoutError):
        return Timeout(str(exc))
    if isinstance(exc, anthropic.APIConnectionError):
        return NetworkUnavailable(str(exc))
    if isinstance(exc, (anthropic.AuthenticationError, anthropic.PermissionDeniedError)):
        return AuthFailure(str(exc))
    if isinstance(exc, anthropic.RateLimitError):
        return QuotaExceeded(str(exc))
    if isinstance(exc, (anthropic.BadRequestError, anthropic.UnprocessableEntityError)):
        return MalformedRequest(str(exc))
    return ModelError(str(exc))


# One AsyncAnthropic (and connection pool) per key and timeout, shared by requests
_clients: dict[tuple[Optional[str], float], anthropic.AsyncAnthropic] = {}


def get_client(api_key: Optional[str], timeout: float) -> anthropic.AsyncAnthropic:
    client = _clients.get((api_key, timeout))
    if client is None:
        client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)
        _clients[(api_key, timeout)] = client
    return client


async def close_clients() -> None:
    """Close every cached client; called on app shutdown."""
    while _clients:
        _, client = _clients.popitem()
        await client.close()


class ModelGateway:
    def __init__(self, settings: Optional[Settings] = None, client: Optional[Any] = None):
        self.settings = settings or get_settings()
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self.settings.ai_configured

    @property
    def client(self):
        if self._client is None:
            self._client = get_client(self.settings.anthropic_api_key, self.settings.timeout_seconds)
        return self._client

    async def generate(self, prompt: str, schema: dict, name: str, max_tokens: Optional[int] = None) -> dict:
        """
        Ask the model for an object matching `schema`.

        Returns the tool input as a dict. Raises a GatewayError subclass on
        any failure, including a reply that carries no tool call.
        """
        try:
            response = await self.client.messages.create(
                model=self.settings.anthropic_model,
                max_tokens=max_tokens or self.settings.max_tokens,
                tools=[{
                    "name": name,
                    "description": "Submit the structured result.",
                    "input_schema": schema,
                }],
                tool_choice={"type": "tool", "name": name},
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise translate_error(e) from e

        for block in response.content:
            if getattr(block, "type", None) == "tool_use" and block.name == name:
                if isinstance(block.input, dict):
                    return block.input
                break

        logger.error("Model reply had no usable %s tool call (stop_reason=%s)", name, response.stop_reason)
        raise ModelError(f"no {name} tool call in model reply")
