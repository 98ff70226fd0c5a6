from .client import (
    ChatCompletionError,
    ChatCompletionResponseError,
    ChatCompletionStatusError,
    ChatCompletionTransportError,
    RequestEncodingError,
    build_payload,
    extract_content,
    request_chat_completion,
)

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
