from __future__ import annotations

from tenderdesk.llm.client import (
    GatewayError,
    GatewayPaymentRequiredError,
    GatewayRateLimitError,
    chat_completion,
    chat_completion_tool_call,
    parse_json_object,
)

__all__ = [
    "GatewayError",
    "GatewayPaymentRequiredError",
    "GatewayRateLimitError",
    "chat_completion",
    "chat_completion_tool_call",
    "parse_json_object",
]
