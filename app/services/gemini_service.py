"""Adapter for the Gemini ``generateContent`` endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.config import Settings
from app.exceptions import FailureReason, GenerationError

logger = logging.getLogger(__name__)

_RATE_LIMIT_STATUS = "RESOURCE_EXHAUSTED"


class GeminiService:
    """Wrapper around Gemini's REST text generation endpoint."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    @property
    def url(self) -> str:
        endpoint = self._settings.api_endpoint.rstrip("/")
        return f"{endpoint}/v1beta/models/{self._settings.gemini_model}:generateContent"

    async def generate(self, prompt: str) -> str:
        """Return the model's text for ``prompt``, trimmed.

        Every failure is raised as :class:`GenerationError` with a
        :class:`FailureReason` the caller can branch on.
        """

        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        headers = {
            "x-goog-api-key": self._settings.gemini_api_key or "",
            "Content-Type": "application/json",
        }

        try:
            response = await self._client.post(
                self.url,
                headers=headers,
                json=payload,
                timeout=self._settings.gemini_timeout,
            )
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.warning("Gemini request timed out", exc_info=exc)
            raise GenerationError(
                "The haiku service timed out. Please try again.",
                reason=FailureReason.TIMEOUT,
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise _status_error(exc.response) from exc
        except httpx.HTTPError as exc:
            logger.exception("Unexpected Gemini HTTP error")
            raise GenerationError(
                "Could not reach the haiku service.",
                reason=FailureReason.TRANSPORT,
            ) from exc

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Gemini returned non-JSON body", extra={"response_text": response.text})
            raise GenerationError(
                "Invalid response from the haiku service.",
                reason=FailureReason.INVALID_RESPONSE,
            ) from exc

        return _extract_text(data)


def _status_error(response: httpx.Response) -> GenerationError:
    """Classify an HTTP error response."""

    api_status, api_message = _error_details(response)
    status_code = response.status_code
    rate_limited = status_code == 429 or api_status == _RATE_LIMIT_STATUS

    if rate_limited:
        logger.info(
            "Gemini rate limit hit",
            extra={"status_code": status_code, "api_status": api_status},
        )
        return GenerationError(
            api_message or "The haiku service is rate limited.",
            status_code=status_code,
            reason=FailureReason.RATE_LIMITED,
        )

    logger.error(
        "Gemini request failed",
        extra={
            "status_code": status_code,
            "api_status": api_status,
            "response_text": response.text,
        },
    )
    return GenerationError(
        api_message or f"The haiku service returned an error ({status_code}).",
        status_code=status_code,
        reason=FailureReason.HTTP_ERROR,
    )


def _error_details(response: httpx.Response) -> tuple[str | None, str | None]:
    """Pull ``error.status`` and ``error.message`` out of a Google API error body."""

    try:
        error = response.json()["error"]
        return error.get("status"), error.get("message")
    except (ValueError, KeyError, TypeError, AttributeError):
        return None, None


def _extract_text(data: Any) -> str:
    try:
        parts = data["candidates"][0]["content"]["parts"]
        text = "".join(part.get("text", "") for part in parts)
    except (KeyError, IndexError, TypeError, AttributeError) as exc:
        block_reason = None
        if isinstance(data, dict):
            block_reason = (data.get("promptFeedback") or {}).get("blockReason")
        logger.error(
            "Malformed Gemini response",
            extra={"raw_response": data, "block_reason": block_reason},
        )
        raise GenerationError(
            "Invalid response from the haiku service.",
            reason=FailureReason.INVALID_RESPONSE,
        ) from exc

    text = text.strip()
    if not text:
        raise GenerationError(
            "The haiku service returned an empty haiku.",
            reason=FailureReason.INVALID_RESPONSE,
        )
    return text
