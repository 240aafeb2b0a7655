"""OpenAI vision model boundary.

``VisionClient.analyze`` sends one PNG to the model and returns the decoded
JSON object. ``parse_vision_report`` turns that object into a trusted
``ComplianceReport``. Failures are mapped onto the VisionBoundaryError
family; only timeouts and unknown failures are retried.
"""

from __future__ import annotations

import asyncio
import base64
import json
from typing import Any

import openai
import structlog
from openai import AsyncOpenAI
from pydantic import ValidationError as PydanticValidationError

from typoscale.core.config import AnalysisConfig
from typoscale.core.exceptions import (
    InvalidVisionResponseError,
    UnknownVisionError,
    VisionBoundaryError,
    VisionRateLimitedError,
    VisionTimeoutError,
)
from typoscale.core.metrics import track_vision_call
from typoscale.core.retry import RetryConfig, call_with_retry
from typoscale.typography.schemas import ComplianceReport
from typoscale.vision.prompts import USER_INSTRUCTION, build_system_prompt

logger = structlog.get_logger(__name__)

VISION_RETRY = RetryConfig(
    max_attempts=3,
    initial_delay=1.0,
    max_delay=10.0,
    jitter_max=1.0,
    retry_exceptions=(VisionTimeoutError, UnknownVisionError),
)


def image_bytes_to_data_url(image_bytes: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(image_bytes).decode()


def parse_vision_report(raw: dict[str, Any]) -> ComplianceReport:
    """Validate a raw model reply against the report schema.

    Raises:
        InvalidVisionResponseError: If the reply does not match.
    """
    try:
        return ComplianceReport.model_validate(raw)
    except PydanticValidationError as e:
        logger.error("vision_response_invalid", error_count=e.error_count(), errors=e.errors()[:5])
        raise InvalidVisionResponseError(
            "Vision model response failed schema validation",
            details={"error_count": e.error_count()},
        ) from e


class VisionClient:
    """Calls a vision-capable chat completion model."""

    def __init__(
        self,
        config: AnalysisConfig,
        client: AsyncOpenAI | None = None,
        *,
        api_key: str | None = None,
        retry: RetryConfig | None = None,
    ) -> None:
        self.config = config
        self._client = client or AsyncOpenAI(api_key=api_key, max_retries=0)
        self.retry = (retry or VISION_RETRY).with_attempts(config.vision_retry_attempts)
        self.system_prompt = build_system_prompt(config.enabled_sections)

    async def analyze(self, image_bytes: bytes) -> dict[str, Any]:
        """Send ``image_bytes`` (PNG) to the model and return its JSON reply."""
        return await call_with_retry(
            lambda: self._analyze_once(image_bytes),
            self.retry,
            operation="vision_analyze",
        )

    async def analyze_report(self, image_bytes: bytes) -> ComplianceReport:
        """Like ``analyze``, with the reply validated as a ComplianceReport.

        Raises:
            InvalidVisionResponseError: If the reply breaks the report schema.
        """
        return parse_vision_report(await self.analyze(image_bytes))

    async def _analyze_once(self, image_bytes: bytes) -> dict[str, Any]:
        model = self.config.vision_model
        logger.info("vision_request_started", model=model, image_bytes=len(image_bytes))
        try:
            with track_vision_call(model):
                response = await asyncio.wait_for(
                    self._client.chat.completions.create(
                        model=model,
                        messages=[
                            {"role": "system", "content": self.system_prompt},
                            {
                                "role": "user",
                                "content": [
                                    {"type": "text", "text": USER_INSTRUCTION},
                                    {
                                        "type": "image_url",
                                        "image_url": {
                                            "url": image_bytes_to_data_url(image_bytes),
                                            "detail": "high",
                                        },
                                    },
                                ],
                            },
                        ],
                        max_completion_tokens=self.config.vision_max_completion_tokens,
                        response_format={"type": "json_object"},
                    ),
                    timeout=self.config.vision_timeout_seconds,
                )
        except VisionBoundaryError:
            raise
        except Exception as e:
            raise self._map_error(e) from e

        return self._decode(response)

    @staticmethod
    def _decode(response: Any) -> dict[str, Any]:
        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise InvalidVisionResponseError("Vision model returned an empty response")

        try:
            payload = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error("vision_response_not_json", preview=content[:200])
            raise InvalidVisionResponseError("Vision model response is not valid JSON") from e

        if not isinstance(payload, dict):
            raise InvalidVisionResponseError("Vision model response is not a JSON object")

        logger.info("vision_request_completed", keys=sorted(payload))
        return payload

    @staticmethod
    def _map_error(error: Exception) -> VisionBoundaryError:
        if isinstance(error, openai.RateLimitError):
            logger.warning("vision_rate_limited", error=str(error))
            return VisionRateLimitedError(details={"provider_message": str(error)[:200]})
        if isinstance(error, asyncio.TimeoutError | openai.APITimeoutError):
            logger.warning("vision_timeout", error=str(error))
            return VisionTimeoutError()
        logger.error("vision_request_failed", error_type=type(error).__name__, error=str(error))
        return UnknownVisionError(details={"error_type": type(error).__name__})

    async def check_health(self) -> bool:
        """Make a minimal request to verify credentials and connectivity."""
        try:
            await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self.config.vision_model,
                    messages=[{"role": "user", "content": "test"}],
                    max_completion_tokens=5,
                ),
                timeout=self.config.vision_timeout_seconds,
            )
            return True
        except Exception as e:
            logger.warning("vision_health_check_failed", error=str(e))
            return False
