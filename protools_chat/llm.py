"""Upstream LLM clients used by the proxy."""

from typing import Optional

import httpx

from .config import Settings
from .prompts import SYSTEM_PROMPT


class LLMError(Exception):
    """Upstream call failed or returned an error payload."""


class GeminiClient:
    name = "gemini"
    base_url = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(self, api_key: str, model: str = "gemini-1.5-flash-latest",
                 client: Optional[httpx.Client] = None, timeout: float = 30.0):
        self.api_key = api_key
        self.model = model
        self.client = client or httpx.Client(timeout=timeout)

    def generate(self, message: str) -> str:
        try:
            response = self.client.post(
                f"{self.base_url}/models/{self.model}:generateContent",
                params={"key": self.api_key},
                json={
                    "contents": [{"parts": [{"text": message}]}],
                    "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
                    "generationConfig": {
                        "temperature": 0.7,
                        "maxOutputTokens": 1024,
                    },
                },
            )
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise LLMError(str(exc)) from exc

        if not isinstance(data, dict):
            raise LLMError("unexpected Gemini payload")
        if data.get("error"):
            error = data["error"]
            raise LLMError(error.get("message", str(error)) if isinstance(error, dict) else str(error))
        if response.is_error:
            raise LLMError(f"Gemini API error: {response.status_code}")

        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        try:
            parts = (candidates[0].get("content") or {}).get("parts") or []
            return "".join(part.get("text", "") for part in parts)
        except (AttributeError, TypeError) as exc:
            raise LLMError(f"unexpected Gemini payload: {exc}") from exc


class OpenAIClient:
    name = "openai"
    url = "https://api.openai.com/v1/chat/completions"

    def __init__(self, api_key: str, model: str = "gpt-4o-mini",
                 client: Optional[httpx.Client] = None, timeout: float = 30.0):
        self.api_key = api_key
        self.model = model
        self.client = client or httpx.Client(timeout=timeout)

    def generate(self, message: str) -> str:
        try:
            response = self.client.post(
                self.url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": message},
                    ],
                    "max_tokens": 500,
                    "temperature": 0.7,
                },
            )
            response.raise_for_status()
            data = response.json()
            return data["choices"][0]["message"]["content"] or ""
        except httpx.HTTPStatusError as exc:
            raise LLMError(f"OpenAI API error: {exc.response.status_code} - {exc.response.text}") from exc
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as exc:
            raise LLMError(str(exc)) from exc


def select_llm(settings: Settings, client: Optional[httpx.Client] = None):
    """OpenAI when its key is set, otherwise Gemini, otherwise None."""
    if settings.openai_api_key:
        return OpenAIClient(settings.openai_api_key, settings.openai_model, client=client)
    if settings.gemini_api_key:
        return GeminiClient(settings.gemini_api_key, settings.gemini_model, client=client)
    return None
