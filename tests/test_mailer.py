# tests/test_mailer.py
"""
Tests for the SMTP mailer modes
Run: pytest tests/test_mailer.py -v
"""
import smtplib
import pytest

from mailer import EmailSendError, Mailer


def test_log_mode_does_not_deliver(monkeypatch):
    mailer = Mailer("smtp.example.com", 587, "user", "pass", mode="log")
    monkeypatch.setattr(mailer, "_deliver", lambda msg: pytest.fail("should not deliver"))
    assert mailer.send_property_confirmation("owner@example.com", "Owner", "Nice flat", "abc") is False


def test_missing_credentials_outside_production_is_log_only():
    assert Mailer("smtp.example.com", 587).log_only is True
    assert Mailer("smtp.example.com", 587, production=True).log_only is False


def test_invalid_recipient_raises():
    with pytest.raises(EmailSendError):
        Mailer("smtp.example.com", 587, mode="log").send("not-an-address", "Hi", "<p>Hi</p>")


def test_delivery_failure_only_raises_in_production(monkeypatch):
    def fail(msg):
        raise smtplib.SMTPException("boom")

    dev = Mailer("smtp.example.com", 587, "user", "pass")
    monkeypatch.setattr(dev, "_deliver", fail)
    assert dev.send_property_decision("o@example.com", "O", "Flat", "abc", approved=True) is False

    prod = Mailer("smtp.example.com", 587, "user", "pass", production=True)
    monkeypatch.setattr(prod, "_deliver", fail)
    with pytest.raises(EmailSendError):
        prod.send_property_decision("o@example.com", "O", "Flat", "abc", approved=False, rejection_reason="Dup")


def test_sent_message_contents(monkeypatch):
    sent = []
    mailer = Mailer("smtp.example.com", 587, "user", "pass", from_email="noreply@estatehub.test",
                    site_url="https://estatehub.test/")
    monkeypatch.setattr(mailer, "_deliver", sent.append)
    assert mailer.send_property_decision("o@example.com", "O", "Flat <b>", "abc123", approved=True) is True
    msg = sent[0]
    assert msg["Subject"] == "Property Approved: Flat <b>"
    html = msg.get_body(preferencelist=("html",)).get_content()
    assert "Flat &lt;b&gt;" in html
    assert "https://estatehub.test/property/abc123" in html
