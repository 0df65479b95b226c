"""Tests for environment configuration."""

import pytest

from formguard.config import RECAPTCHA_VERIFY_URL, CaptchaSettings


class TestCaptchaSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("FORMGUARD_RECAPTCHA_VERIFY_URL", raising=False)
        monkeypatch.delenv("FORMGUARD_RECAPTCHA_TIMEOUT", raising=False)

        settings = CaptchaSettings.from_env()
        assert settings.verify_url == RECAPTCHA_VERIFY_URL
        assert settings.timeout is None

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("FORMGUARD_RECAPTCHA_VERIFY_URL", "http://localhost:9000/verify")
        monkeypatch.setenv("FORMGUARD_RECAPTCHA_TIMEOUT", "2.5")

        settings = CaptchaSettings.from_env()
        assert settings.verify_url == "http://localhost:9000/verify"
        assert settings.timeout == 2.5

    def test_invalid_timeout(self, monkeypatch):
        monkeypatch.setenv("FORMGUARD_RECAPTCHA_TIMEOUT", "soon")

        with pytest.raises(ValueError, match="FORMGUARD_RECAPTCHA_TIMEOUT"):
            CaptchaSettings.from_env()
