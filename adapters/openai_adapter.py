"""OpenAI adapter for chat, JSON and vision completions.

Every AI feature in LifeTrack goes through this module so the SDK error types
are translated to application exceptions in one place.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

import openai
from openai import OpenAI

from app.config import settings
from app.exceptions import (
    RateLimitedError,
    ServiceUnavailableError,
    UpstreamServiceError,
    UpstreamTimeoutError,
)

logger = logging.getLogger("lifetrack.openai")

_client: Optional[OpenAI] = None


def is_configured() -> bool:
    """True when an API key is available."""
    return bool(settings.openai_api_key)


def _get_client() -> OpenAI:
    global _client
    if not is_configured():
        raise ServiceUnavailableError("AI service is not configured")
    if _client is None:
        _client = OpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.openai_timeout_sec,
            max_retries=0,
        )
    return _client


def reset_client() -> None:
    """Drop the cached client (used when settings change, e.g. in tests)."""
    global _client
    _client = None


def chat_text(
    messages: List[Dict[str, Any]],
    *,
    model: Optional[str] = None,
    temperature: float = 0.7,
    max_tokens: Optional[int] = None,
    json_mode: bool = False,
    timeout: Optional[float] = None,
) -> str:
    """Run a chat completion and return the assistant text.

    Raises:
        ServiceUnavailableError: no API key configured
        UpstreamTimeoutError: the request timed out
        RateLimitedError: rate limit or quota exhausted
        UpstreamServiceError: any other API failure or an empty answer
    """
    client = _get_client()
    params: Dict[str, Any] = {
        "model": model or settings.openai_model,
        "messages": messages,
        "temperature": temperature,
    }
    if max_tokens:
        params["max_tokens"] = max_tokens
    if json_mode:
        params["response_format"] = {"type": "json_object"}
    if timeout:
        params["timeout"] = timeout

    try:
        completion = client.chat.completions.create(**params)
    except openai.APITimeoutError as exc:
        logger.warning("OpenAI request timed out: %s", exc)
        raise UpstreamTimeoutError("AI request timed out") from exc
    except openai.RateLimitError as exc:
        logger.warning("OpenAI rate limit or quota hit: %s", exc)
        raise RateLimitedError("AI service rate limit exceeded, please try again later") from exc
    except openai.APIError as exc:
        logger.error("OpenAI request failed: %s", exc)
        raise UpstreamServiceError(f"AI request failed: {exc}") from exc

    content = completion.choices[0].message.content if completion.choices else None
    if not content:
        raise UpstreamServiceError("AI service returned an empty response")
    return content


def chat_json(
    system_prompt: str,
    user_prompt: str,
    **kwargs: Any,
) -> Dict[str, Any]:
    """Chat completion in JSON mode, returning the parsed object.

    Raises UpstreamServiceError when no JSON object can be recovered.
    """
    content = chat_text(
        [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        json_mode=True,
        **kwargs,
    )
    parsed = extract_json_object(content)
    if not parsed:
        logger.warning("Could not parse JSON from AI response: %.200s", content)
        raise UpstreamServiceError("AI service returned invalid JSON")
    return parsed


def vision_json(
    prompt: str,
    image_url: str,
    *,
    max_tokens: int = 1500,
    **kwargs: Any,
) -> Dict[str, Any]:
    """Send an image (http(s) URL or data URL) with a prompt and parse the JSON answer."""
    content = chat_text(
        [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": image_url}},
                ],
            }
        ],
        model=kwargs.pop("model", None) or settings.openai_vision_model,
        max_tokens=max_tokens,
        temperature=kwargs.pop("temperature", 0.1),
        **kwargs,
    )
    parsed = extract_json_object(content)
    if not parsed:
        logger.warning("Could not parse JSON from vision response: %.200s", content)
        raise UpstreamServiceError("AI service returned invalid JSON")
    return parsed


def image_data_url(image_base64: str, mime_type: str = "image/jpeg") -> str:
    """Wrap raw base64 image data as a data URL; data URLs pass through."""
    if image_base64.startswith("data:"):
        return image_base64
    return f"data:{mime_type};base64,{image_base64}"


def extract_json_object(raw_text: str) -> Dict[str, Any]:
    """Parse a JSON object out of model output, tolerating code fences and prose."""
    text = (raw_text or "").strip()
    if not text:
        return {}

    if text.startswith("```"):
        text = re.sub(r"^```[a-zA-Z0-9]*\s*", "", text)
        text = re.sub(r"\s*```$", "", text)

    try:
        parsed = json.loads(text)
        if isinstance(parsed, dict):
            return parsed
    except json.JSONDecodeError:
        pass

    match = re.search(r"\{[\s\S]*\}", text)
    if not match:
        return {}
    try:
        parsed = json.loads(match.group(0))
        return parsed if isinstance(parsed, dict) else {}
    except json.JSONDecodeError:
        return {}
