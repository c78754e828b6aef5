"""HTTP client for the Gemini generateContent API."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Sequence

import httpx

from ...config import Settings, settings
from ...errors import (
    MalformedResponseError,
    MissingCredentialError,
    RequestTimeoutError,
    UpstreamFailureError,
)

# Status codes worth retrying: rate limiting and transient server errors.
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

logger = logging.getLogger(__name__)


class GeminiClient:
    def __init__(
        self,
        config: Settings | None = None,
        *,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config or settings
        self.base_url = self.config.gemini_base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else self.config.llm_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else self.config.llm_max_retries
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else self.config.llm_backoff_seconds
        )
        self.transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self.transport,
        )

    def _require_api_key(self) -> str:
        if not self.config.has_gemini_credential:
            raise MissingCredentialError()
        return self.config.gemini_api_key.strip()

    def generate_json(
        self,
        parts: Sequence[dict],
        schema: dict,
        *,
        model: str,
    ) -> Any:
        """Ask ``model`` for structured JSON output and return the decoded value.

        ``parts`` are Gemini content parts (``{"text": ...}`` or
        ``{"inlineData": {...}}``); ``schema`` is the ``responseSchema``
        declaration the answer must follow.
        """
        api_key = self._require_api_key()
        payload = {
            "contents": [{"role": "user", "parts": list(parts)}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": schema,
            },
        }
        data = self._post(f"{self.base_url}/models/{model}:generateContent", payload, api_key)
        return parse_json_text(extract_candidate_text(data))

    def _post(self, url: str, payload: dict, api_key: str) -> dict:
        """POST ``payload`` to ``url`` and decode the JSON body.

        ``self.timeout`` is a deadline for the whole call: every attempt,
        every backoff sleep and the body read share it. Timeouts are not
        retried.
        """
        client = self._get_client()
        headers = {"x-goog-api-key": api_key}
        deadline = time.monotonic() + self.timeout
        try:
            attempt = 0
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    logger.warning(f"Gemini request exceeded its {self.timeout:.0f}s deadline")
                    raise RequestTimeoutError()
                body = b""
                try:
                    with client.stream(
                        "POST",
                        url,
                        json=payload,
                        headers=headers,
                        timeout=httpx.Timeout(remaining, connect=min(10.0, remaining)),
                    ) as response:
                        body = _read_body(response, deadline)
                    response.raise_for_status()
                    try:
                        return json.loads(body)
                    except ValueError as exc:
                        raise MalformedResponseError() from exc
                except httpx.HTTPStatusError as e:
                    status_code = e.response.status_code
                    attempt += 1
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    if (
                        status_code not in RETRYABLE_STATUS_CODES
                        or attempt > self.max_retries
                        or time.monotonic() + wait_time >= deadline
                    ):
                        message = _upstream_error_message(body)
                        logger.warning(f"Gemini request failed with HTTP {status_code}: {message}")
                        raise UpstreamFailureError(message, status_code=status_code) from e
                    logger.debug(
                        f"Gemini returned HTTP {status_code}, retrying in {wait_time:.1f}s "
                        f"(attempt {attempt}/{self.max_retries})"
                    )
                    time.sleep(wait_time)
                except httpx.TimeoutException as e:
                    logger.warning(f"Gemini request timed out: {e}")
                    raise RequestTimeoutError() from e
                except httpx.TransportError as e:
                    attempt += 1
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    if attempt > self.max_retries or time.monotonic() + wait_time >= deadline:
                        logger.warning(f"Gemini service unreachable at {self.base_url}: {e}")
                        raise UpstreamFailureError() from e
                    logger.debug(f"Gemini network error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                    time.sleep(wait_time)
        finally:
            client.close()


def _read_body(response: httpx.Response, deadline: float) -> bytes:
    """Read a streamed body, giving up once ``deadline`` has passed."""
    body = bytearray()
    for chunk in response.iter_bytes():
        body.extend(chunk)
        if time.monotonic() > deadline:
            logger.warning("Gemini response body still arriving at the call deadline")
            raise RequestTimeoutError()
    return bytes(body)


def _upstream_error_message(body: bytes) -> str:
    """Pull the human-readable message out of a Gemini error body, if any."""
    try:
        data = json.loads(body)
    except ValueError:
        return UpstreamFailureError.default_message
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        message = str(error.get("message") or "").strip()
        if message:
            return message
    return UpstreamFailureError.default_message


def extract_candidate_text(data: Any) -> str:
    """Concatenate the text parts of the first candidate in a generateContent response."""
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError) as exc:
        raise MalformedResponseError() from exc
    if not isinstance(parts, list):
        raise MalformedResponseError()
    text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
    if not text.strip():
        raise MalformedResponseError("The AI service returned an empty response.")
    return text


def parse_json_text(text: str) -> Any:
    """Decode JSON returned by the model, tolerating Markdown code fences."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.splitlines()
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].startswith("```"):
            lines = lines[:-1]
        cleaned = "\n".join(lines).strip()
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError() from exc


def check_readiness(config: Settings | None = None, transport: httpx.BaseTransport | None = None) -> dict:
    """One-shot check that a credential is configured and the model endpoint answers."""
    config = config or settings
    result: dict[str, Any] = {
        "configured": config.has_gemini_credential,
        "reachable": None,
        "model": config.sequencing_model,
    }
    if not result["configured"]:
        return result
    url = f"{config.gemini_base_url.rstrip('/')}/models/{config.sequencing_model}"
    try:
        with httpx.Client(timeout=5.0, transport=transport) as client:
            response = client.get(url, headers={"x-goog-api-key": config.gemini_api_key.strip()})
        result["reachable"] = response.status_code == 200
        if response.status_code != 200:
            result["error"] = _upstream_error_message(response.content)
    except httpx.HTTPError as exc:
        result["reachable"] = False
        result["error"] = str(exc)
    return result
