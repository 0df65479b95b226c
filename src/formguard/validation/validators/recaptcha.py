"""reCAPTCHA verification.

The only check that performs I/O: one form-encoded POST to the verification
endpoint. Transport and parse failures are logged and reported as a failed
verification, never raised.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from formguard.config import CaptchaSettings
from formguard.forms.rules import ReCaptchaRule

logger = logging.getLogger(__name__)


async def recaptcha(
    token: Any,
    options: ReCaptchaRule | None,
    settings: CaptchaSettings | None = None,
    client: httpx.AsyncClient | None = None,
) -> list[str]:
    """Verify a reCAPTCHA response token.

    Args:
        token: The response token submitted by the browser
        options: Rule options carrying the secret
        settings: Endpoint and timeout (defaults to CaptchaSettings())
        client: Shared HTTP client; a short-lived one is created if omitted

    Returns:
        Failure messages; empty when the service reports success.
    """
    errors = []
    if not token:
        errors.append("No reCaptcha response provided.")

    secret = options.secret if options is not None else None
    if not isinstance(secret, str) or not secret:
        errors.append("ReCaptcha is misconfigured.")

    if errors:
        return errors

    settings = settings or CaptchaSettings()
    reply = await _post_verification(settings, str(token), secret, client)

    if reply.get("success") is not True:
        errors.append("ReCaptcha validation failed.")
    return errors


async def _post_verification(
    settings: CaptchaSettings,
    token: str,
    secret: str,
    client: httpx.AsyncClient | None,
) -> dict[str, Any]:
    data = {"secret": secret, "response": token}
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.timeout) as own_client:
                response = await own_client.post(settings.verify_url, data=data)
        else:
            response = await client.post(settings.verify_url, data=data)
    except httpx.HTTPError as e:
        logger.warning("reCAPTCHA verification request failed: %s", e)
        return {}

    try:
        reply = response.json()
    except ValueError:
        logger.warning(
            "reCAPTCHA verification returned a non-JSON body (status %s)",
            response.status_code,
        )
        return {}

    if not isinstance(reply, dict):
        logger.warning("reCAPTCHA verification returned unexpected JSON: %r", reply)
        return {}
    if reply.get("success") is not True:
        logger.info(
            "reCAPTCHA verification rejected (status %s, error-codes %s)",
            response.status_code,
            reply.get("error-codes"),
        )
    return reply
