from typing import Any, Dict, Optional, Union

import requests

from trackfinder.crosscutting.config import Settings, get_settings
from trackfinder.crosscutting.credentials import SessionCredential
from trackfinder.crosscutting.logging import get_logger
from trackfinder.domain.errors import ProviderError, ProviderTimeout
from trackfinder.domain.ports import TextGenerator

logger = get_logger(__name__)

FAILED_REQUEST_MESSAGE = 'Failed to fetch from Gemini API. Please check your API key.'


class GeminiTextGenerator(TextGenerator):
    """Gemini ``generateContent`` adapter implementing the TextGenerator port."""

    def __init__(self,
                 credential: Union[SessionCredential, str],
                 settings: Optional[Settings] = None,
                 session: Optional[requests.Session] = None):
        """Initialize Gemini provider.

        Args:
            credential: API key, or the session credential holding it
            settings: model, endpoint and timeout; global settings when omitted
            session: optional requests session (shared connection pool)
        """
        if isinstance(credential, str):
            credential = SessionCredential(credential)
        self._credential = credential
        self._settings = settings or get_settings()
        self._http = session or requests

    @property
    def endpoint(self) -> str:
        base = self._settings.api_base_url.rstrip('/')
        return f"{base}/models/{self._settings.model}:generateContent"

    def _build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            'contents': [{
                'parts': [{
                    'text': prompt
                }]
            }]
        }

    def generate(self, prompt: str) -> str:
        """Send ``prompt`` in one request and return the generated text.

        Raises:
            ProviderTimeout: no answer within the configured timeout
            ProviderError: transport failure, non-2xx status or no text in the reply
        """
        headers = {
            'Content-Type': 'application/json',
            'x-goog-api-key': self._credential.require(),
        }

        logger.debug(f"Sending prompt to {self._settings.model} ({len(prompt)} chars)")
        try:
            response = self._http.post(
                self.endpoint,
                headers=headers,
                json=self._build_payload(prompt),
                timeout=self._settings.timeout_seconds,
            )
        except requests.exceptions.Timeout:
            raise ProviderTimeout(
                f"Gemini API did not respond within {self._settings.timeout_seconds:g} seconds"
            )
        except requests.exceptions.RequestException as e:
            raise ProviderError(f"Could not reach Gemini API: {e}")

        if not response.ok:
            logger.warning(f"Gemini API returned HTTP {response.status_code}")
            raise ProviderError(FAILED_REQUEST_MESSAGE, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError:
            raise ProviderError('Gemini API returned a response that is not JSON',
                                status_code=response.status_code)

        return self._extract_text(data)

    def _extract_text(self, data: Any) -> str:
        """Pull the generated text out of a generateContent response body."""
        unexpected = ProviderError('Gemini API returned an unexpected response')
        if not isinstance(data, dict):
            raise unexpected

        candidates = data.get('candidates') or []
        if not isinstance(candidates, list):
            raise unexpected
        if candidates:
            candidate = candidates[0]
            if not isinstance(candidate, dict):
                raise unexpected
            content = candidate.get('content') or {}
            if not isinstance(content, dict):
                raise unexpected
            parts = content.get('parts') or []
            if not isinstance(parts, list):
                raise unexpected
            texts = [part.get('text', '') for part in parts if isinstance(part, dict)]
            if not all(isinstance(t, str) for t in texts):
                raise unexpected
            text = ''.join(texts)
            if text:
                return text
            finish_reason = candidate.get('finishReason')
            if finish_reason and finish_reason != 'STOP':
                raise ProviderError(f"Gemini API returned no text (finish reason: {finish_reason})")

        feedback = data.get('promptFeedback') or {}
        block_reason = feedback.get('blockReason') if isinstance(feedback, dict) else None
        if block_reason:
            raise ProviderError(f"Gemini API blocked the request ({block_reason})")

        raise ProviderError('Gemini API returned no text')
