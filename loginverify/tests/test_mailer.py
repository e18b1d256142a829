import asyncio
import json

import httpx
import pytest

from loginverify.config import Settings
from loginverify.errors import CallableError
from loginverify.mailer import MailClient, build_verification_message, decision_url, send_verification_email
from loginverify.schemas import MailMessage

def test_decision_url_shape():
    assert decision_url("https://example.com", "approve", "abc123") == "https://example.com?action=approve&id=abc123"
    assert decision_url("https://h/fn?x=1", "deny", "abc123") == "https://h/fn?x=1&action=deny&id=abc123"

def test_decision_url_encodes_reserved_characters():
    url = decision_url("https://example.com", "approve", "a&b=c d")
    assert url == "https://example.com?action=approve&id=a%26b%3Dc+d"

def test_message_contains_both_links():
    s = Settings(mail_from="auth@example.org", verify_base_url="https://v.example.org")
    msg = build_verification_message(s, "abc123", "user@example.org")
    assert msg.to == "user@example.org"
    assert msg.from_ == "auth@example.org"
    assert msg.subject == "Confirm your login to Flutter Login App"
    assert "https://v.example.org?action=approve&id=abc123" in msg.html
    assert "https://v.example.org?action=deny&id=abc123" in msg.html

def test_mail_client_posts_sendgrid_payload():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(202)

    client = MailClient("SG.key", "https://mail.test/v3/mail/send", transport=httpx.MockTransport(handler))
    msg = MailMessage(to="user@example.org", from_="auth@example.org", subject="s", html="<p>x</p>")
    asyncio.run(client.send(msg))
    assert seen["url"] == "https://mail.test/v3/mail/send"
    assert seen["auth"] == "Bearer SG.key"
    assert seen["body"] == {
        "personalizations": [{"to": [{"email": "user@example.org"}]}],
        "from": {"email": "auth@example.org"},
        "subject": "s",
        "content": [{"type": "text/html", "value": "<p>x</p>"}],
    }

def test_mail_client_raises_on_error_status():
    transport = httpx.MockTransport(lambda request: httpx.Response(401, json={"errors": []}))
    client = MailClient("SG.bad", "https://mail.test/v3/mail/send", transport=transport)
    msg = MailMessage(to="u@example.org", from_="a@example.org", subject="s", html="h")
    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.send(msg))

class _Boom:
    calls = 0

    async def send(self, message):
        self.calls += 1
        raise httpx.ConnectError("down")

def test_send_failure_is_internal_without_cause_in_message():
    mailer = _Boom()
    with pytest.raises(CallableError) as ei:
        asyncio.run(send_verification_email(
            {"verificationId": "abc123", "email": "u@example.org"},
            Settings(sendgrid_api_key="SG.key"),
            mailer,
        ))
    assert ei.value.kind == "internal"
    assert ei.value.message == "Failed to send email"
    assert mailer.calls == 1

def test_unknown_error_kind_becomes_internal():
    err = CallableError("teapot", "x")
    assert err.kind == "internal"
    assert err.to_body() == {"error": {"status": "INTERNAL", "message": "x"}}
    assert err.http_status == 500
