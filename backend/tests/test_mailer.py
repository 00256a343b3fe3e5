"""
Tests for the SMTP mailer. smtplib.SMTP is patched out.
"""

import smtplib
from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest

from orderdesk.domain import LineItem, Order
from orderdesk.errors import NotificationError
from orderdesk.notifications.mailer import Mailer, render_order_email

SMTP_PATH = "orderdesk.notifications.mailer.smtplib.SMTP"


@pytest.fixture
def order():
    return Order(
        id="order-1",
        name="Jane <script>",
        sender_number="0820000000",
        receiver_name="Thandi",
        receiver_number="0831111111",
        pep_code="",
        created_at=datetime(2025, 3, 14, 9, 5, 33),
        products=[
            LineItem("DONSA", 2, "Ezasekamelweni"),
            LineItem("ASTHMA & DLISO", 1, "Ezempilo"),
        ],
    )


@pytest.fixture
def mailer():
    return Mailer(host="smtp.example.com", port=587, user="orders@example.com",
                  password="secret", recipient="ops@example.com")


class TestRenderOrderEmail:

    def test_contains_fields(self, order):
        body = render_order_email(order)
        assert "New Order Received" in body
        assert "0820000000" in body
        assert "Thandi" in body
        assert "order-1" in body
        assert "2025/03/14, 09:05:33" in body
        assert "<td>DONSA</td><td>Ezasekamelweni</td><td>2</td>" in body

    def test_pep_code_placeholder(self, order):
        assert "<td>N/A</td>" in render_order_email(order)
        order.pep_code = "PEP42"
        assert "<td>PEP42</td>" in render_order_email(order)

    def test_escapes_client_values(self, order):
        body = render_order_email(order)
        assert "<script>" not in body
        assert "Jane &lt;script&gt;" in body
        assert "ASTHMA &amp; DLISO" in body


class TestMailer:

    def test_build_message(self, mailer, order):
        message = mailer.build_message(order)
        assert message["Subject"] == "New Order #order-1"
        assert message["To"] == "ops@example.com"
        assert message["From"] == "Order System <orders@example.com>"

    def test_send(self, mailer, order):
        with patch(SMTP_PATH) as smtp_cls:
            server = smtp_cls.return_value
            mailer.send_order_notification(order)

        smtp_cls.assert_called_once_with("smtp.example.com", 587, timeout=30)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("orders@example.com", "secret")
        server.send_message.assert_called_once()
        sent = server.send_message.call_args.args[0]
        assert sent["Subject"] == "New Order #order-1"
        server.quit.assert_called_once()

    def test_send_without_credentials_skips_login(self, order):
        mailer = Mailer(host="smtp.example.com", recipient="ops@example.com")
        with patch(SMTP_PATH) as smtp_cls:
            mailer.send_order_notification(order)
        smtp_cls.return_value.login.assert_not_called()

    def test_transport_failure(self, mailer, order):
        with patch(SMTP_PATH) as smtp_cls:
            smtp_cls.return_value.send_message.side_effect = smtplib.SMTPRecipientsRefused({})
            with pytest.raises(NotificationError):
                mailer.send_order_notification(order)
            smtp_cls.return_value.quit.assert_called_once()

    def test_connection_refused(self, mailer, order):
        with patch(SMTP_PATH, side_effect=ConnectionRefusedError("refused")):
            with pytest.raises(NotificationError, match="ConnectionRefusedError"):
                mailer.send_order_notification(order)

    def test_auth_failure_closes_connection(self, mailer, order):
        with patch(SMTP_PATH) as smtp_cls:
            smtp_cls.return_value.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad")
            with pytest.raises(NotificationError):
                mailer.send_order_notification(order)
            smtp_cls.return_value.close.assert_called_once()

    def test_unconfigured(self, order):
        with pytest.raises(NotificationError, match="not configured"):
            Mailer(host="", recipient="").send_order_notification(order)

    def test_tls_verification_can_be_disabled(self):
        context = Mailer(host="h", recipient="r", verify_tls=False)._tls_context()
        assert context.check_hostname is False


class TestVerify:

    def test_ok(self, mailer):
        with patch(SMTP_PATH):
            assert mailer.verify() is True

    def test_failure_is_logged_not_raised(self, mailer, caplog):
        with patch(SMTP_PATH, side_effect=OSError("no route")):
            with caplog.at_level("ERROR", logger="orderdesk.notifications.mailer"):
                assert mailer.verify() is False
        assert "SMTP Error" in caplog.text

    def test_unconfigured(self):
        assert Mailer(host="", recipient="").verify() is False
