import logging
import threading

import requests

from config import get_config

logger = logging.getLogger(__name__)

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"
REQUEST_TIMEOUT = 10


def send_email(to: str, subject: str, text: str, html: str | None = None) -> bool:
    """
    Sends one email through the SendGrid v3 API.

    :param to: Recipient address.
    :param subject: Subject line.
    :param text: Plain-text body.
    :param html: Optional HTML body.
    :return: True if SendGrid accepted the message, False if sending is not
             configured. HTTP/network errors propagate.
    """
    config = get_config()
    api_key = config["SENDGRID_API_KEY"]
    if not api_key:
        logger.info("SENDGRID_API_KEY not configured - skipping email send")
        return False

    content = [{"type": "text/plain", "value": text}]
    if html:
        content.append({"type": "text/html", "value": html})

    payload = {
        "personalizations": [{"to": [{"email": to}]}],
        "from": {"email": config["EMAIL_FROM"]},
        "subject": subject,
        "content": content,
    }
    response = requests.post(
        SENDGRID_URL,
        json=payload,
        headers={"Authorization": f"Bearer {api_key}"},
        timeout=REQUEST_TIMEOUT,
    )
    response.raise_for_status()
    logger.info(f"Email '{subject}' sent to {to}")
    return True


def _send_logged(to: str, subject: str, text: str, html: str | None) -> None:
    try:
        send_email(to, subject, text, html)
    except Exception as e:
        logger.error(f"Failed to send email '{subject}' to {to}: {e}")


def send_email_async(
    to: str, subject: str, text: str, html: str | None = None
) -> threading.Thread:
    """
    Sends an email on a daemon thread. Failures are logged, never raised,
    and the caller never waits for delivery.
    """
    thread = threading.Thread(
        target=_send_logged, args=(to, subject, text, html), daemon=True
    )
    thread.start()
    return thread
