from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import httpx

from ..config import EndpointConfig


class ChatCompletionError(RuntimeError):
    """Raised when a chat-completion request cannot produce content."""


class RequestEncodingError(ChatCompletionError):
    """The request body could not be serialized."""


class ChatCompletionTransportError(ChatCompletionError):
    """The endpoint could not be reached or the connection failed."""


class ChatCompletionStatusError(ChatCompletionError):
    """The endpoint answered with a non-2xx status."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(f"Chat completion request failed ({status_code}): {detail}")
        self.status_code = status_code
        self.detail = detail


class ChatCompletionResponseError(ChatCompletionError):
    """The endpoint answered 2xx but the body did not have the expected shape."""


def _headers(*, api_key: Optional[str] = None) -> Dict[str, str]:
    headers = {
        "Content-Type": "application/json",
        "Accept": "application/json",
    }
    key = (api_key or "").strip()
    if key:
        headers["Authorization"] = f"Bearer {key}"
    return headers


def _build_messages(system_prompt: str, user_content: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_content},
    ]


def build_payload(system_prompt: str, user_content: str, endpoint: EndpointConfig) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "model": endpoint.model_name,
        "messages": _build_messages(system_prompt, user_content),
        "max_tokens": endpoint.max_tokens,
    }
    if endpoint.temperature is not None:
        payload["temperature"] = endpoint.temperature
    return payload


def _encode_payload(payload: Dict[str, Any]) -> bytes:
    try:
        return json.dumps(payload, ensure_ascii=False, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        # UnicodeEncodeError (lone surrogates) is a ValueError
        raise RequestEncodingError(f"Could not encode request body: {exc}") from exc


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:500] or response.reason_phrase
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            error = error.get("message")
        detail = error or payload.get("message")
        if detail:
            return str(detail)
    return json.dumps(payload)[:500]


def extract_content(payload: Any) -> str:
    """Return ``choices[0].message.content`` or raise ChatCompletionResponseError."""

    if not isinstance(payload, dict):
        raise ChatCompletionResponseError("Response body is not a JSON object")
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        raise ChatCompletionResponseError("Response missing choices")
    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    if not isinstance(message, dict):
        raise ChatCompletionResponseError("Response missing choices[0].message")
    content = message.get("content")
    if not isinstance(content, str):
        raise ChatCompletionResponseError("Response missing choices[0].message.content")
    return content


async def request_chat_completion(
    *,
    system_prompt: str,
    user_content: str,
    endpoint: EndpointConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """POST a system+user message pair and return the first choice's content."""

    body = _encode_payload(build_payload(system_prompt, user_content, endpoint))

    async with httpx.AsyncClient(transport=transport) as client:
        try:
            response = await client.post(
                endpoint.endpoint_url,
                headers=_headers(api_key=endpoint.api_key),
                content=body,
                timeout=endpoint.timeout_seconds,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ChatCompletionTransportError(
                f"Chat completion request failed: {exc.__class__.__name__}: {exc}"
            ) from exc

    if not response.is_success:
        raise ChatCompletionStatusError(response.status_code, _error_detail(response))

    try:
        payload = response.json()
    except ValueError as exc:
        raise ChatCompletionResponseError(f"Response body is not valid JSON: {exc}") from exc
    return extract_content(payload)


__all__ = [
    "ChatCompletionError",
    "ChatCompletionResponseError",
    "ChatCompletionStatusError",
    "ChatCompletionTransportError",
    "RequestEncodingError",
    "build_payload",
    "extract_content",
    "request_chat_completion",
]
