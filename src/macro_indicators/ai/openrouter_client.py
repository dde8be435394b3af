"""Wrapper for OpenRouter (or any OpenAI-compatible) chat narration."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from macro_indicators.ai.base import NarrationProvider
from macro_indicators.ai.prompt import SYSTEM_PROMPT
from macro_indicators.core.config import AiConfig
from macro_indicators.core.errors import NarrationError
from macro_indicators.core.models import AnalysisBrief, NarrationResult

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("sp500_analysis", "fear_greed_analysis", "currency_analysis", "analysis_summary")

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")


class OpenRouterClient(NarrationProvider):
    """Call the chat completions endpoint and parse the structured report."""

    def __init__(self, config: AiConfig, client: httpx.AsyncClient | None = None) -> None:
        self._cfg = config
        self._client = client or httpx.AsyncClient(timeout=config.timeout_seconds)
        self.model = config.model
        self.provider = config.provider

    async def narrate(self, brief: AnalysisBrief) -> NarrationResult:
        if not self._cfg.api_key:
            raise NarrationError("No API key configured for the narration provider")
        headers = {
            "Authorization": f"Bearer {self._cfg.api_key}",
            "Content-Type": "application/json",
            "X-Title": self._cfg.title,
        }
        request_body = {
            "model": self._cfg.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": brief.prompt},
            ],
            "max_tokens": self._cfg.max_tokens,
            "temperature": self._cfg.temperature,
        }

        logger.info("Running macro indicators narration with %s", self._cfg.model)
        try:
            async for attempt in self._retrying():
                with attempt:
                    response = await self._client.post(
                        self._cfg.api_url, headers=headers, json=request_body
                    )
                    response.raise_for_status()
                    data = response.json()
        except httpx.HTTPError as exc:
            raise NarrationError(f"Narration request failed: {exc}") from exc
        except ValueError as exc:
            raise NarrationError(f"Narration response is not JSON: {exc}") from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise NarrationError("Narration response has no message content") from exc

        result = parse_narration(content)
        logger.info("Narration completed, fear/greed value: %s", result.fear_greed_value or "N/A")
        return result

    async def close(self) -> None:
        await self._client.aclose()

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            wait=wait_fixed(2),
            stop=stop_after_attempt(max(self._cfg.retry_attempts, 1)),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )


def parse_narration(content: str) -> NarrationResult:
    """Parse model output given as raw JSON or inside a ```json block."""
    text = (content or "").strip()
    match = _FENCED_JSON.search(text)
    if match:
        text = match.group(1)
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise NarrationError(f"Failed to parse narration response: {exc}") from exc
    if not isinstance(parsed, dict):
        raise NarrationError("Narration response is not a JSON object")

    missing = [name for name in REQUIRED_FIELDS if not parsed.get(name)]
    if missing:
        raise NarrationError(f"Narration response missing required fields: {', '.join(missing)}")

    extra: Dict[str, Any] = {
        key: value
        for key, value in parsed.items()
        if key not in REQUIRED_FIELDS and key not in {"fear_greed_value", "createdAt"}
    }
    return NarrationResult(
        sp500_analysis=parsed["sp500_analysis"],
        fear_greed_analysis=parsed["fear_greed_analysis"],
        currency_analysis=parsed["currency_analysis"],
        analysis_summary=parsed["analysis_summary"],
        fear_greed_value=parsed.get("fear_greed_value"),
        created_at=parsed.get("createdAt") or datetime.now(tz=timezone.utc).isoformat(),
        extra=extra,
    )
