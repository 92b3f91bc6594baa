import json
import logging
import re
import time
from typing import Any, Dict, List, Optional

from openai import OpenAI
from openai import APIStatusError, APITimeoutError, RateLimitError

from tenderdesk import config

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."
PAYMENT_REQUIRED_MESSAGE = "AI credits exhausted. Please add credits to continue."

_GATEWAY_CLIENT = None


class GatewayError(Exception):
    status_code = 502

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class GatewayRateLimitError(GatewayError):
    status_code = 429

    def __init__(self, message: str = RATE_LIMIT_MESSAGE):
        super().__init__(message)


class GatewayPaymentRequiredError(GatewayError):
    status_code = 402

    def __init__(self, message: str = PAYMENT_REQUIRED_MESSAGE):
        super().__init__(message)


def get_gateway_client() -> OpenAI:
    global _GATEWAY_CLIENT
    if _GATEWAY_CLIENT is None:
        api_key = config.get_gateway_api_key()
        logger.debug(
            "Creating gateway client with base_url=%s, timeout=%s",
            config.LLM_GATEWAY_URL, config.LLM_REQUEST_TIMEOUT,
        )
        # retries are handled below; the SDK must not retry 429 on its own
        _GATEWAY_CLIENT = OpenAI(
            base_url=config.LLM_GATEWAY_URL,
            api_key=api_key,
            timeout=config.LLM_REQUEST_TIMEOUT,
            max_retries=0,
        )
    return _GATEWAY_CLIENT


def reset_gateway_client() -> None:
    global _GATEWAY_CLIENT
    _GATEWAY_CLIENT = None


def _translate_status_error(model: str, exc: APIStatusError) -> GatewayError:
    status = getattr(exc, "status_code", None)
    if isinstance(exc, RateLimitError) or status == 429:
        logger.warning("Gateway model=%s rate limited", model)
        return GatewayRateLimitError()
    if status == 402:
        logger.warning("Gateway model=%s reported exhausted credits", model)
        return GatewayPaymentRequiredError()
    logger.error("Gateway model=%s error status=%s: %s", model, status, str(exc))
    return GatewayError(f"AI gateway error: {status}")


def _create_completion(model: str, max_retries: int, **kwargs: Any):
    client = get_gateway_client()
    for attempt in range(max_retries + 1):
        try:
            return client.chat.completions.create(model=model, **kwargs)
        except (APITimeoutError, TimeoutError):
            if attempt < max_retries:
                wait_time = 2 ** attempt
                logger.warning(
                    "Gateway model=%s timeout on attempt %d/%d, retrying in %ds...",
                    model, attempt + 1, max_retries + 1, wait_time,
                )
                time.sleep(wait_time)
            else:
                logger.error("Gateway model=%s timeout after %d attempts", model, max_retries + 1)
                raise
        except APIStatusError as exc:
            raise _translate_status_error(model, exc) from exc
    raise GatewayError(f"Gateway model={model} failed after {max_retries + 1} attempts")


def chat_completion(
    messages: List[Dict[str, Any]],
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    response_format: Optional[Dict[str, Any]] = None,
    max_retries: int = 2,
) -> str:
    model = model or config.LLM_MODEL
    logger.info("Calling gateway model=%s temperature=%s max_tokens=%s", model, temperature, max_tokens)
    kwargs: Dict[str, Any] = {"messages": messages}
    if temperature is not None:
        kwargs["temperature"] = temperature
    if max_tokens is not None:
        kwargs["max_tokens"] = max_tokens
    if response_format is not None:
        kwargs["response_format"] = response_format

    start_time = time.time()
    completion = _create_completion(model, max_retries, **kwargs)
    elapsed = time.time() - start_time
    if not completion.choices:
        return ""
    content = getattr(completion.choices[0].message, "content", "") or ""
    if isinstance(content, list):
        content = "".join(
            part.get("text", "") if isinstance(part, dict) else str(part)
            for part in content
        )
    logger.info("Gateway model=%s returned %d chars in %.2fs", model, len(content), elapsed)
    return content


def chat_completion_tool_call(
    messages: List[Dict[str, Any]],
    tool: Dict[str, Any],
    model: Optional[str] = None,
    max_retries: int = 2,
) -> Dict[str, Any]:
    model = model or config.LLM_MODEL
    tool_name = tool["function"]["name"]
    logger.info("Calling gateway model=%s with forced tool=%s", model, tool_name)

    start_time = time.time()
    completion = _create_completion(
        model,
        max_retries,
        messages=messages,
        tools=[tool],
        tool_choice={"type": "function", "function": {"name": tool_name}},
    )
    elapsed = time.time() - start_time

    message = completion.choices[0].message if completion.choices else None
    tool_calls = getattr(message, "tool_calls", None) or []
    if not tool_calls:
        logger.error("Gateway model=%s returned no tool call for tool=%s", model, tool_name)
        raise GatewayError("No tool call in AI response")

    raw_arguments = tool_calls[0].function.arguments or "{}"
    try:
        arguments = json.loads(raw_arguments)
    except json.JSONDecodeError as exc:
        logger.error("Gateway tool=%s returned invalid arguments: %s", tool_name, raw_arguments[:500])
        raise GatewayError("AI response could not be parsed") from exc
    logger.info("Gateway model=%s tool=%s returned in %.2fs", model, tool_name, elapsed)
    return arguments


def parse_json_object(raw: str) -> Dict[str, Any]:
    cleaned = (
        raw.replace("```json", "")
        .replace("```", "")
        .strip()
    )
    cleaned = re.sub(r'[\x00-\x08\x0b-\x0c\x0e-\x1f\x7f-\x9f]', '', cleaned)
    match = re.search(r"\{.*\}", cleaned, flags=re.DOTALL)
    if match:
        cleaned = match.group(0)
    cleaned = re.sub(r",\s*([}\]])", r"\1", cleaned)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.debug("Problematic JSON (first 1500 chars):\n%s", cleaned[:1500])
        raise ValueError(f"LLM returned invalid JSON: {str(e)}") from e
    if not isinstance(parsed, dict):
        raise ValueError("LLM returned JSON that is not an object")
    return parsed
