# backend/src/foodshare/ai/client.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from foodshare.core.config import Settings, get_settings
from foodshare.core.errors import ExternalServiceError


class GeminiAPIError(ExternalServiceError):
    def __init__(self, detail: str, status: Optional[int] = None):
        super().__init__(detail)
        self.status = status


def text_part(text: str) -> Dict[str, Any]:
    return {"text": text}


def image_part(mime_type: str, data_b64: str) -> Dict[str, Any]:
    return {"inline_data": {"mime_type": mime_type, "data": data_b64}}


class GeminiClient:
    """Minimal client for the generateContent REST endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-1.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: int = 60,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiClient":
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.gemini_timeout,
        )

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def generate(self, parts: List[Dict[str, Any]]) -> str:
        """
        Sends one user turn and returns the concatenated text of the first candidate.
        HTTP errors are raised as GeminiAPIError with the status code in the message,
        so the retry layer can recognize rate limits and overloads.
        """
        if not self.api_key:
            raise ExternalServiceError("Missing Gemini API key. Set GEMINI_API_KEY.")

        payload = {"contents": [{"role": "user", "parts": parts}]}
        try:
            r = requests.post(
                self.url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ExternalServiceError(f"AI service not reachable: {e}") from e

        if r.status_code >= 400:
            raise GeminiAPIError(f"[{r.status_code}] {_error_message(r)}", status=r.status_code)

        data = r.json()
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        content_parts = candidates[0].get("content", {}).get("parts", [])
        return "".join(p.get("text", "") for p in content_parts).strip()


def _error_message(response) -> str:
    try:
        err = response.json().get("error", {})
        message = f"{err.get('status', '')} {err.get('message', '')}".strip()
    except (ValueError, AttributeError):
        message = ""
    return message or getattr(response, "text", "")[:200] or str(getattr(response, "reason", ""))


def get_ai_client() -> GeminiClient:
    return GeminiClient.from_settings(get_settings())
