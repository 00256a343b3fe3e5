"""
Operator email notification over SMTP.

Connection model follows the usual STARTTLS submission flow: connect on the
configured port, upgrade with STARTTLS, log in, send, quit.
"""

import html
import logging
import smtplib
import socket
import ssl
from email.message import EmailMessage
from email.utils import formataddr

from orderdesk.domain import Order
from orderdesk.errors import NotificationError
from orderdesk.utils.time_utils import format_sast

logger = logging.getLogger(__name__)

SENDER_NAME = "Order System"
SMTP_TIMEOUT = 30


def _e(value) -> str:
    return html.escape("" if value is None else str(value))


def render_order_email(order: Order) -> str:
    """Render the fixed HTML order notification."""
    product_rows = "".join(
        f"<tr><td>{_e(p.name)}</td><td>{_e(p.category)}</td><td>{_e(p.quantity)}</td></tr>"
        for p in order.products
    )
    return f"""
    <div style="font-family: Arial, sans-serif; color: #333;">
      <h2 style="color: #2e7d32;">New Order Received</h2>
      <table style="width:100%; border-collapse: collapse;">
        <tr><td><b>Customer Name</b></td><td>{_e(order.name)}</td></tr>
        <tr><td><b>Sender Number</b></td><td>{_e(order.sender_number)}</td></tr>
        <tr><td><b>Receiver Name</b></td><td>{_e(order.receiver_name)}</td></tr>
        <tr><td><b>Receiver Number</b></td><td>{_e(order.receiver_number)}</td></tr>
        <tr><td><b>Pep Code</b></td><td>{_e(order.pep_code or "N/A")}</td></tr>
        <tr><td><b>Order ID</b></td><td>{_e(order.id)}</td></tr>
        <tr><td><b>Created At</b></td><td>{_e(format_sast(order.created_at))}</td></tr>
      </table>
      <h3>Products Ordered:</h3>
      <table style="width:100%; border-collapse: collapse;">
        <tr style="background:#f1f8e9;">
          <th>Product</th><th>Category</th><th>Quantity</th>
        </tr>
        {product_rows}
      </table>
    </div>
    """


class Mailer:
    """Sends order notifications to a single operator address."""

    def __init__(self, host: str, port: int = 587, user: str = "", password: str = "",
                 recipient: str = "", verify_tls: bool = True):
        self.host = host
        self.port = port
        self.user = user
        self._password = password
        self.recipient = recipient
        self.verify_tls = verify_tls

    @classmethod
    def from_settings(cls, settings) -> "Mailer":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            user=settings.smtp_user,
            password=settings.smtp_pass,
            recipient=settings.company_email,
            verify_tls=settings.smtp_tls_verify,
        )

    @property
    def configured(self) -> bool:
        return bool(self.host and self.recipient)

    def _tls_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        if not self.verify_tls:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def _connect(self) -> smtplib.SMTP:
        server = smtplib.SMTP(self.host, self.port, timeout=SMTP_TIMEOUT)
        try:
            server.ehlo()
            server.starttls(context=self._tls_context())
            server.ehlo()
            if self.user and self._password:
                server.login(self.user, self._password)
        except Exception:
            server.close()
            raise
        return server

    def build_message(self, order: Order) -> EmailMessage:
        message = EmailMessage()
        message["From"] = formataddr((SENDER_NAME, self.user))
        message["To"] = self.recipient
        message["Subject"] = f"New Order #{order.id}"
        message.set_content(f"New order {order.id} received. View this message in an HTML-capable client.")
        message.add_alternative(render_order_email(order), subtype="html")
        return message

    def send_order_notification(self, order: Order) -> None:
        """
        Send the order email.

        Raises:
            NotificationError: mail is not configured or the transport failed.
        """
        if not self.configured:
            raise NotificationError("SMTP host or operator address not configured")
        message = self.build_message(order)
        try:
            server = self._connect()
            try:
                server.send_message(message)
            finally:
                server.quit()
        except (smtplib.SMTPException, socket.error, ssl.SSLError) as e:
            raise NotificationError(f"SMTP send failed: {type(e).__name__}: {e}") from e
        logger.info("Email sent", extra={"order_id": order.id})

    def verify(self) -> bool:
        """Startup probe: connect and authenticate, logging any failure."""
        if not self.configured:
            logger.error("SMTP not configured (SMTP_HOST / COMPANY_EMAIL missing)")
            return False
        try:
            server = self._connect()
            server.quit()
        except (smtplib.SMTPException, socket.error, ssl.SSLError) as e:
            logger.error("SMTP Error: %s: %s", type(e).__name__, e)
            return False
        logger.info("SMTP ready")
        return True
