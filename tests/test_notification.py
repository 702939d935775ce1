# tests/test_notification.py
import smtplib

import pytest
from tenacity import wait_none

from cafe.domain.errors import DispatchError
from cafe.services import notification_service
from cafe.services.notification_service import EmailNotifier, LoggingNotifier, build_notifier


class FakeSMTP:
    instances = []
    failures = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.sent = []
        self.logged_in = None
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, user, password):
        self.logged_in = (user, password)

    def send_message(self, message):
        if FakeSMTP.failures:
            raise FakeSMTP.failures.pop(0)
        self.sent.append(message)


@pytest.fixture
def smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.failures = []
    monkeypatch.setattr(notification_service.smtplib, "SMTP", FakeSMTP)
    monkeypatch.setattr(EmailNotifier._send.retry, "wait", wait_none())
    return FakeSMTP


@pytest.fixture
def mailer():
    return EmailNotifier(host="smtp.test", port=587, username="shop@monuchai.in", password="app-pass")


def test_otp_message_contents(mailer):
    message = mailer.build_otp_message("a@b.com", "482913")

    assert message["To"] == "a@b.com"
    assert message["From"] == "shop@monuchai.in"
    assert message["Subject"] == "Your Monu Chai Order Verification Code"
    assert "482913" in message.get_body(("plain",)).get_content()
    assert "482913" in message.get_body(("html",)).get_content()


def test_send_otp(smtp, mailer):
    mailer.send_otp("a@b.com", "482913")

    [conn] = smtp.instances
    assert conn.logged_in == ("shop@monuchai.in", "app-pass")
    assert conn.sent[0]["To"] == "a@b.com"


def test_transient_failure_is_retried(smtp, mailer):
    smtp.failures = [smtplib.SMTPServerDisconnected("Connection unexpectedly closed")]

    mailer.send_otp("a@b.com", "482913")

    assert len(smtp.instances) == 2
    assert smtp.instances[-1].sent


def test_rejected_recipient_is_not_retried(smtp, mailer):
    smtp.failures = [smtplib.SMTPRecipientsRefused({"x@y.com": (550, b"No such user")})]

    with pytest.raises(DispatchError, match="was rejected"):
        mailer.send_otp("x@y.com", "482913")

    assert len(smtp.instances) == 1


def test_bad_credentials_become_dispatch_error(smtp, mailer):
    smtp.failures = [smtplib.SMTPAuthenticationError(535, b"Bad credentials")]

    with pytest.raises(DispatchError):
        mailer.send_otp("a@b.com", "482913")


def test_persistent_transport_failure(smtp, mailer):
    smtp.failures = [ConnectionRefusedError("refused")] * 3

    with pytest.raises(DispatchError, match="Failed to send email"):
        mailer.send_otp("a@b.com", "482913")

    assert len(smtp.instances) == 3


def test_dev_notifier_without_credentials(monkeypatch):
    monkeypatch.setattr(notification_service, "EMAIL_USER", "")

    notifier = build_notifier()

    assert isinstance(notifier, LoggingNotifier)
    notifier.send_otp("a@b.com", "482913")
