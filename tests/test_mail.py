import smtplib

import pytest
import requests

from conftest import add_drive
from uniplace.exceptions import MailRelayError
from uniplace.services import mail_client, mail_relay


class FakeSMTP:
    """Records what the relay would have sent."""
    sent = []
    fail_with = None

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *args):
        return False

    def starttls(self):
        pass

    def login(self, user, password):
        pass

    def send_message(self, message, to_addrs=None):
        if FakeSMTP.fail_with:
            raise FakeSMTP.fail_with
        FakeSMTP.sent.append((message, to_addrs))


@pytest.fixture
def smtp(monkeypatch):
    FakeSMTP.sent = []
    FakeSMTP.fail_with = None
    monkeypatch.setattr(mail_relay.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


# ============ TEMPLATE ============

def test_body_is_escaped_and_line_broken():
    html = mail_relay.render_email_html("Hi <team>\nDrive at 10 & 11")
    assert "Hi &lt;team&gt;<br>Drive at 10 &amp; 11" in html
    assert "<team>" not in html
    assert "UniPlace" in html


def test_message_has_plain_and_html_parts():
    message = mail_relay.build_message(["a@x.edu", "b@x.edu"], "Drive update", "Hello")
    assert message["To"] == "a@x.edu, b@x.edu"
    assert message["Subject"] == "Drive update"
    assert [part.get_content_type() for part in message.get_payload()] == ["text/plain", "text/html"]


# ============ RELAY ENDPOINT ============

def test_send_email_route(client, smtp):
    response = client.post("/send-email", json={"to": ["a@x.edu", "b@x.edu"], "subject": "Hi", "body": "Hello"})
    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert len(smtp.sent) == 1
    assert smtp.sent[0][1] == ["a@x.edu", "b@x.edu"]


def test_send_email_smtp_failure(client, smtp):
    smtp.fail_with = smtplib.SMTPException("relay refused")
    response = client.post("/send-email", json={"to": ["a@x.edu"], "subject": "Hi", "body": "Hello"})
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "relay refused"}


def test_send_email_requires_recipients(client, smtp):
    response = client.post("/send-email", json={"to": [], "subject": "Hi", "body": "Hello"})
    assert response.status_code == 422
    assert smtp.sent == []


# ============ RELAY CLIENT ============

class FakeResponse:
    def __init__(self, status_code, payload=None):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self.text = str(payload)
        self._payload = payload

    def json(self):
        return self._payload


def test_client_posts_payload(monkeypatch):
    calls = []

    def fake_post(url, json=None, timeout=None):
        calls.append((url, json))
        return FakeResponse(200, {"success": True})

    monkeypatch.setattr(mail_client.requests, "post", fake_post)
    assert mail_client.send_bulk_email(["a@x.edu"], "Hi", "Hello") == {"success": True}
    assert calls == [(mail_client.MAIL_RELAY_URL, {"to": ["a@x.edu"], "subject": "Hi", "body": "Hello"})]


def test_client_raises_on_error_status(monkeypatch):
    monkeypatch.setattr(mail_client.requests, "post", lambda *a, **kw: FakeResponse(500, {"success": False}))
    with pytest.raises(MailRelayError):
        mail_client.send_bulk_email(["a@x.edu"], "Hi", "Hello")


def test_client_raises_when_unreachable(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.exceptions.ConnectionError("refused")

    monkeypatch.setattr(mail_client.requests, "post", boom)
    with pytest.raises(MailRelayError):
        mail_client.send_bulk_email(["a@x.edu"], "Hi", "Hello")


class HtmlResponse(FakeResponse):
    def __init__(self):
        super().__init__(200, "<html>proxy login</html>")

    def json(self):
        raise requests.exceptions.JSONDecodeError("Expecting value", self.text, 0)


def test_client_raises_on_non_json_reply(monkeypatch):
    monkeypatch.setattr(mail_client.requests, "post", lambda *a, **kw: HtmlResponse())
    with pytest.raises(MailRelayError):
        mail_client.send_bulk_email(["a@x.edu"], "Hi", "Hello")


@pytest.mark.parametrize("payload", [{"success": False, "error": "quota"}, {}, ["ok"]])
def test_client_raises_when_delivery_not_confirmed(monkeypatch, payload):
    monkeypatch.setattr(mail_client.requests, "post", lambda *a, **kw: FakeResponse(200, payload))
    with pytest.raises(MailRelayError):
        mail_client.send_bulk_email(["a@x.edu"], "Hi", "Hello")


# ============ EMAIL CENTER ============

def test_email_center_send(client, db, roster, admin_headers, monkeypatch):
    add_drive(db, "Acme", "SDE", "Selected", ["2101"])
    sent = []
    monkeypatch.setattr(
        "uniplace.api.v1.endpoints.emails.send_bulk_email",
        lambda to, subject, body: sent.append((to, subject, body)) or {"success": True},
    )

    response = client.post(
        "/api/v1/emails/send",
        headers=admin_headers,
        json={"group": "unplaced", "subject": "Next drive", "body": "Register today"},
    )
    assert response.status_code == 200
    assert response.json()["recipients"] == 2
    assert sent == [(["b@x.edu", "d@x.edu"], "Next drive", "Register today")]


def test_email_center_rejects_blank_message(client, roster, admin_headers):
    response = client.post(
        "/api/v1/emails/send",
        headers=admin_headers,
        json={"group": "all", "subject": "  ", "body": "Hello"},
    )
    assert response.status_code == 400


def test_email_center_no_recipients(client, roster, admin_headers):
    response = client.post(
        "/api/v1/emails/send",
        headers=admin_headers,
        json={"group": "placed", "subject": "Congrats", "body": "Well done"},
    )
    assert response.status_code == 400


def test_email_center_relay_down(client, roster, admin_headers, monkeypatch):
    def relay_down(to, subject, body):
        raise MailRelayError("unreachable")

    monkeypatch.setattr("uniplace.api.v1.endpoints.emails.send_bulk_email", relay_down)
    response = client.post(
        "/api/v1/emails/send",
        headers=admin_headers,
        json={"group": "all", "subject": "Hi", "body": "Hello"},
    )
    assert response.status_code == 502
    assert "Sending failed" in response.json()["detail"]


def test_email_center_unconfirmed_delivery_is_502(client, roster, admin_headers, monkeypatch):
    monkeypatch.setattr(mail_client.requests, "post", lambda *a, **kw: FakeResponse(200, {"success": False}))
    response = client.post(
        "/api/v1/emails/send",
        headers=admin_headers,
        json={"group": "all", "subject": "Hi", "body": "Hello"},
    )
    assert response.status_code == 502
    assert "Sending failed" in response.json()["detail"]
