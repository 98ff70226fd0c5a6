from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx

from ...config import EndpointConfig
from ...llm_client import (
    ChatCompletionError,
    ChatCompletionResponseError,
    ChatCompletionStatusError,
    ChatCompletionTransportError,
    RequestEncodingError,
    request_chat_completion,
)
from ...logging_config import logger


class SynthesisFailure(str, Enum):
    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    RESPONSE_SHAPE = "response_shape"
    SERIALIZATION = "serialization"


@dataclass(frozen=True)
class SynthesisResult:
    """Outcome of one synthesis call; ``text`` is the report or a failure message."""

    succeeded: bool
    text: str
    raw_text: Optional[str] = None
    failure: Optional[SynthesisFailure] = None

    @classmethod
    def success(cls, raw_text: str) -> "SynthesisResult":
        return cls(succeeded=True, text=clean_report_text(raw_text), raw_text=raw_text)

    @classmethod
    def failed(cls, failure: SynthesisFailure, message: str) -> "SynthesisResult":
        return cls(succeeded=False, text=message, failure=failure)


_THINK_BLOCK = re.compile(r"\s*<think>.*?</think>\s*", re.DOTALL | re.IGNORECASE)
_OPENING_FENCE = re.compile(r"^```(markdown|md)?[ \t]*(?:\r?\n|$)", re.IGNORECASE)
_CLOSING_FENCE = re.compile(r"(?:^|\r?\n)[ \t]*```$")


def _strip_fences(text: str) -> str:
    opening = _OPENING_FENCE.match(text)
    if opening is None:
        return text
    body = text[opening.end():]
    closing = _CLOSING_FENCE.search(body)
    if closing is not None:
        return body[: closing.start()]
    # A bare opening fence with no closing one is ordinary content
    return body if opening.group(1) else text


def _clean_once(text: str) -> str:
    text = _THINK_BLOCK.sub("", text).strip()
    return _strip_fences(text).strip()


def clean_report_text(text: str) -> str:
    """Drop ``<think>`` traces and wrapping code fences, then trim.

    Repeated until nothing changes, so cleaning clean text is a no-op.
    """
    current = text or ""
    while True:
        cleaned = _clean_once(current)
        if cleaned == current:
            return cleaned
        current = cleaned


def _failure_for(exc: ChatCompletionError) -> SynthesisResult:
    if isinstance(exc, RequestEncodingError):
        return SynthesisResult.failed(SynthesisFailure.SERIALIZATION, f"Request configuration error: {exc}")
    if isinstance(exc, ChatCompletionStatusError):
        return SynthesisResult.failed(
            SynthesisFailure.HTTP_STATUS,
            f"Server returned an error: HTTP {exc.status_code} ({exc.detail})",
        )
    if isinstance(exc, ChatCompletionResponseError):
        return SynthesisResult.failed(
            SynthesisFailure.RESPONSE_SHAPE, f"Failed to parse response data: {exc}"
        )
    if isinstance(exc, ChatCompletionTransportError):
        return SynthesisResult.failed(SynthesisFailure.TRANSPORT, f"Request failed: {exc}")
    return SynthesisResult.failed(SynthesisFailure.TRANSPORT, f"Request failed: {exc}")


async def synthesize(
    system_prompt: str,
    user_content: str,
    endpoint: EndpointConfig,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SynthesisResult:
    """Send one report request; never raises for request or response failures."""

    logger.info(
        "report synthesis started",
        extra={"model": endpoint.model_name, "content_length": len(user_content)},
    )
    try:
        content = await request_chat_completion(
            system_prompt=system_prompt,
            user_content=user_content,
            endpoint=endpoint,
            transport=transport,
        )
    except ChatCompletionError as exc:
        result = _failure_for(exc)
        logger.warning(
            "report synthesis failed",
            extra={"failure": result.failure.value if result.failure else None, "error": str(exc)},
        )
        return result

    result = SynthesisResult.success(content)
    logger.info(
        "report synthesis completed",
        extra={"raw_length": len(content), "clean_length": len(result.text)},
    )
    return result


__all__ = ["SynthesisFailure", "SynthesisResult", "clean_report_text", "synthesize"]
