from __future__ import annotations
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from .config import Settings
from .errors import CallableError
from .schemas import MailMessage, SendResult

logger = logging.getLogger("loginverify")

SUBJECT = "Confirm your login to Flutter Login App"

def decision_url(base_url: str, action: str, verification_id: str) -> str:
    # keeps the deployed link shape: <base>?action=<action>&id=<id>
    sep = "&" if "?" in base_url else "?"
    return f"{base_url}{sep}{urlencode({'action': action, 'id': verification_id})}"

def build_verification_message(settings: Settings, verification_id: str, email: str) -> MailMessage:
    approve_url = decision_url(settings.verify_base_url, "approve", verification_id)
    deny_url = decision_url(settings.verify_base_url, "deny", verification_id)
    html = f"""
      <p>A new login attempt was detected on your account.</p>
      <p>Was this you?</p>
      <p>
        <a href="{approve_url}">Yes, that’s me</a>
        &nbsp;|&nbsp;
        <a href="{deny_url}">No, it isn’t me</a>
      </p>
    """
    return MailMessage(to=email, from_=settings.mail_from, subject=SUBJECT, html=html)

class MailClient:
    """
    SendGrid v3 mail/send client.

    Any transport error or non-2xx response is raised to the caller.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.sendgrid.com/v3/mail/send",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self._transport = transport

    def payload(self, message: MailMessage) -> Dict[str, Any]:
        return {
            "personalizations": [{"to": [{"email": message.to}]}],
            "from": {"email": message.from_},
            "subject": message.subject,
            "content": [{"type": "text/html", "value": message.html}],
        }

    async def send(self, message: MailMessage) -> None:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.post(self.api_url, json=self.payload(message), headers=headers)
            resp.raise_for_status()

async def send_verification_email(data: Dict[str, Any], settings: Settings, mailer: MailClient) -> SendResult:
    verification_id = data.get("verificationId")
    email = data.get("email")
    if not isinstance(verification_id, str) or not isinstance(email, str) or not verification_id or not email:
        raise CallableError("invalid-argument", "verificationId and email are required")

    message = build_verification_message(settings, verification_id, email)

    if not settings.sendgrid_api_key:
        logger.warning("SendGrid API key not set; skipping email send.")
        return SendResult(status="skipped")
    try:
        await mailer.send(message)
    except Exception:
        logger.exception("sendVerificationEmail error")
        raise CallableError("internal", "Failed to send email")
    return SendResult(status="sent")
