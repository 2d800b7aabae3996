"""
Email service — sends transactional email through the Brevo HTTP API.

send_email() is the only transport entry point. It never raises: a missing
API key, a network error or a non-2xx response is logged and reported as
False so that callers on the notification path can simply move on.
"""
import logging

import httpx

from config import settings

logger = logging.getLogger(__name__)

_TIMEOUT_SECONDS = 10.0


def _get_headers() -> dict:
    return {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "api-key": settings.brevo_api_key,
    }


async def send_email(to: str, subject: str, html: str, text: str) -> bool:
    """
    Send one email.

    Args:
        to: Recipient address
        subject: Subject line
        html: HTML body
        text: Plain-text alternative

    Returns:
        True if Brevo accepted the message, False otherwise
    """
    if not settings.email_configured:
        logger.warning(f"Email service not configured; dropping '{subject}' to {to}")
        return False

    payload = {
        "sender": {
            "name": settings.brevo_from_name,
            "email": settings.brevo_from_email,
        },
        "to": [{"email": to}],
        "subject": subject,
        "htmlContent": html,
        "textContent": text,
    }

    try:
        async with httpx.AsyncClient(timeout=_TIMEOUT_SECONDS) as client:
            response = await client.post(
                settings.brevo_api_url,
                headers=_get_headers(),
                json=payload,
            )
    except httpx.HTTPError as e:
        logger.error(f"Email to {to} failed: {e}")
        return False

    if response.is_success:
        logger.info(f"Email sent to {to}: {subject}")
        return True

    logger.error(f"Email to {to} rejected by provider (HTTP {response.status_code})")
    return False
