"""Runtime configuration for formguard."""

from __future__ import annotations

import os
from dataclasses import dataclass

RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


@dataclass
class CaptchaSettings:
    """reCAPTCHA verification settings.

    A single verification attempt is made per check. Retries are left to the
    caller; ``timeout`` is None (no timeout) unless configured.
    """

    verify_url: str = RECAPTCHA_VERIFY_URL
    timeout: float | None = None

    @classmethod
    def from_env(cls) -> CaptchaSettings:
        """Create settings from environment variables.

        FORMGUARD_RECAPTCHA_VERIFY_URL overrides the verification endpoint.
        FORMGUARD_RECAPTCHA_TIMEOUT sets a timeout in seconds.
        """
        verify_url = os.environ.get("FORMGUARD_RECAPTCHA_VERIFY_URL") or RECAPTCHA_VERIFY_URL

        timeout: float | None = None
        raw_timeout = os.environ.get("FORMGUARD_RECAPTCHA_TIMEOUT")
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ValueError(
                    f"FORMGUARD_RECAPTCHA_TIMEOUT must be a number of seconds, got {raw_timeout!r}"
                ) from None

        return cls(verify_url=verify_url, timeout=timeout)
