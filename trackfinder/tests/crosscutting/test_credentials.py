import pytest

from trackfinder.crosscutting.credentials import SessionCredential
from trackfinder.crosscutting.logging import SecretMasker
from trackfinder.domain.errors import ValidationError


def test_set_and_require():
    credential = SessionCredential()
    assert not credential.is_set()
    credential.set("  AIzaTestKey123456 ")
    assert credential.is_set()
    assert credential.require() == "AIzaTestKey123456"


def test_require_without_key_raises():
    with pytest.raises(ValidationError, match="Please enter your Gemini API key"):
        SessionCredential().require()


def test_empty_key_is_rejected():
    credential = SessionCredential()
    with pytest.raises(ValidationError):
        credential.set("   ")
    assert not credential.is_set()


def test_clear_forgets_key():
    credential = SessionCredential("AIzaTestKey123456")
    credential.clear()
    assert not credential.is_set()


def test_repr_masks_key():
    credential = SessionCredential("AIzaTestKey123456")
    assert "AIzaTestKey123456" not in repr(credential)
    assert "AIzaTestKey123456" not in str(credential)
    assert repr(credential) == "SessionCredential(AIza*********3456)"
    assert repr(SessionCredential()) == "SessionCredential(<unset>)"


def test_repr_masks_short_key_fully():
    assert repr(SessionCredential("abc")) == "SessionCredential(***)"


def test_repr_uses_same_masking_as_logs():
    key = "AIzaSyTestKey1234567890abcd"
    masked = SecretMasker().mask_dict({'api_key': key})['api_key']
    assert repr(SessionCredential(key)) == f"SessionCredential({masked})"
