from unittest.mock import Mock, patch

import pytest
import requests

from trackfinder.application.lookup import lookup_tracks
from trackfinder.crosscutting.config import Settings
from trackfinder.crosscutting.credentials import SessionCredential
from trackfinder.domain.entities import LookupRequest
from trackfinder.domain.errors import ProviderError, ProviderTimeout, ValidationError
from trackfinder.domain.outcomes import ProviderFailure
from trackfinder.infrastructure.providers.gemini import FAILED_REQUEST_MESSAGE, GeminiTextGenerator


def _response(status_code=200, body=None, json_error=False):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    if json_error:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


def _text_body(*texts):
    return {
        'candidates': [{
            'content': {'parts': [{'text': t} for t in texts], 'role': 'model'},
            'finishReason': 'STOP',
        }]
    }


class TestGeminiTextGenerator:
    """Contract tests for the Gemini provider adapter."""

    def setup_method(self):
        """Set up test fixtures."""
        self.settings = Settings(
            api_base_url='https://gemini.example/v1beta/',
            model='gemini-test',
            timeout_seconds=7,
        )
        self.http = Mock()
        self.provider = GeminiTextGenerator("AIzaTestKey123456", settings=self.settings, session=self.http)

    def test_generate_posts_prompt_with_key_header(self):
        self.http.post.return_value = _response(body=_text_body("1. Come Together"))

        text = self.provider.generate("List the tracks")

        assert text == "1. Come Together"
        args, kwargs = self.http.post.call_args
        assert args[0] == 'https://gemini.example/v1beta/models/gemini-test:generateContent'
        assert kwargs['headers']['x-goog-api-key'] == "AIzaTestKey123456"
        assert kwargs['headers']['Content-Type'] == 'application/json'
        assert kwargs['json'] == {'contents': [{'parts': [{'text': "List the tracks"}]}]}
        assert kwargs['timeout'] == 7

    def test_generate_joins_multiple_parts(self):
        self.http.post.return_value = _response(body=_text_body("1. A\n", "2. B"))
        assert self.provider.generate("p") == "1. A\n2. B"

    def test_generate_reads_key_from_session_credential_at_call_time(self):
        credential = SessionCredential("AIzaFirstKey12345")
        provider = GeminiTextGenerator(credential, settings=self.settings, session=self.http)
        self.http.post.return_value = _response(body=_text_body("x"))

        credential.set("AIzaSecondKey1234")
        provider.generate("p")

        assert self.http.post.call_args[1]['headers']['x-goog-api-key'] == "AIzaSecondKey1234"

    def test_generate_without_key_raises_validation_error(self):
        provider = GeminiTextGenerator(SessionCredential(), settings=self.settings, session=self.http)
        with pytest.raises(ValidationError):
            provider.generate("p")
        self.http.post.assert_not_called()

    @pytest.mark.parametrize("status_code", [400, 401, 403, 429, 500, 503])
    def test_non_success_status_raises_provider_error(self, status_code):
        self.http.post.return_value = _response(status_code=status_code, body={'error': {}})

        with pytest.raises(ProviderError) as exc_info:
            self.provider.generate("p")

        assert str(exc_info.value) == FAILED_REQUEST_MESSAGE
        assert exc_info.value.status_code == status_code

    def test_timeout_raises_provider_timeout(self):
        self.http.post.side_effect = requests.exceptions.ReadTimeout("read timed out")

        with pytest.raises(ProviderTimeout, match="within 7 seconds"):
            self.provider.generate("p")

    def test_connection_error_raises_provider_error(self):
        self.http.post.side_effect = requests.exceptions.ConnectionError("dns failure")

        with pytest.raises(ProviderError, match="Could not reach Gemini API") as exc_info:
            self.provider.generate("p")
        assert not isinstance(exc_info.value, ProviderTimeout)

    def test_non_json_body_raises_provider_error(self):
        self.http.post.return_value = _response(json_error=True)
        with pytest.raises(ProviderError, match="not JSON"):
            self.provider.generate("p")

    @pytest.mark.parametrize("body", [
        {},
        {'candidates': []},
        {'candidates': [{}]},
        {'candidates': [{'content': {'parts': []}}]},
        {'candidates': [{'content': {'parts': [{'text': ''}]}}]},
    ])
    def test_missing_text_raises_provider_error(self, body):
        self.http.post.return_value = _response(body=body)
        with pytest.raises(ProviderError, match="no text"):
            self.provider.generate("p")

    @pytest.mark.parametrize("body", [
        {'candidates': [{'content': 'oops'}]},
        {'candidates': ['oops']},
        {'candidates': {'a': 1}},
        {'candidates': [{'content': {'parts': 'oops'}}]},
        {'candidates': [{'content': {'parts': [{'text': 5}]}}]},
        {'promptFeedback': 'oops'},
    ])
    def test_malformed_envelope_raises_provider_error(self, body):
        self.http.post.return_value = _response(body=body)
        with pytest.raises(ProviderError):
            self.provider.generate("p")

    @pytest.mark.parametrize("body", [
        {'candidates': [{'content': 'oops'}]},
        {'candidates': {'a': 1}},
        {'candidates': [{'content': {'parts': [{'text': 5}]}}]},
    ])
    def test_malformed_envelope_becomes_provider_failure_outcome(self, body):
        self.http.post.return_value = _response(body=body)

        outcome = lookup_tracks(LookupRequest("The Beatles", "Abbey Road"), self.provider)

        assert outcome == ProviderFailure(message='Gemini API returned an unexpected response')

    def test_blocked_prompt_reports_block_reason(self):
        self.http.post.return_value = _response(body={'promptFeedback': {'blockReason': 'SAFETY'}})
        with pytest.raises(ProviderError, match="SAFETY"):
            self.provider.generate("p")

    def test_empty_candidate_reports_finish_reason(self):
        body = {'candidates': [{'content': {'parts': []}, 'finishReason': 'RECITATION'}]}
        self.http.post.return_value = _response(body=body)
        with pytest.raises(ProviderError, match="RECITATION"):
            self.provider.generate("p")

    def test_unexpected_body_type_raises_provider_error(self):
        self.http.post.return_value = _response(body=["not", "a", "dict"])
        with pytest.raises(ProviderError, match="unexpected response"):
            self.provider.generate("p")

    def test_uses_requests_module_by_default(self):
        provider = GeminiTextGenerator("AIzaTestKey123456", settings=self.settings)
        with patch('trackfinder.infrastructure.providers.gemini.requests.post') as mock_post:
            mock_post.return_value = _response(body=_text_body("1. A"))
            assert provider.generate("p") == "1. A"
            mock_post.assert_called_once()

    def test_key_not_in_error_messages(self):
        self.http.post.return_value = _response(status_code=401)
        with pytest.raises(ProviderError) as exc_info:
            self.provider.generate("p")
        assert "AIzaTestKey123456" not in str(exc_info.value)
