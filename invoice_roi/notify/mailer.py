"""
Report e-mail delivery over SMTP.

Delivery is best-effort: dispatch_report_email() logs and swallows every
failure so that a mail problem never fails the request that produced the
report.

Usage:
    mailer = ReportMailer.from_settings(settings)
    background_tasks.add_task(dispatch_report_email, mailer, to, inputs, results, pdf)
"""

import logging
import re
import smtplib
from email.message import EmailMessage
from typing import Optional

from ..core.config import Settings
from ..reporting.formatting import summary_lines
from ..roi import ROIInputs, ROIResults
from ..utils.retry import RetryConfig, DEFAULT_RETRY_CONFIG, retry_with_backoff

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

REPORT_SUBJECT = "Your Invoicing ROI Simulation Report"
REPORT_FILENAME = "roi-report.pdf"


def is_valid_email(address) -> bool:
    """Check an address against the local@domain.tld pattern."""
    return isinstance(address, str) and bool(EMAIL_PATTERN.match(address))


class ReportMailer:
    """Sends rendered reports as e-mail attachments."""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        app_url: str = "https://example.com",
        timeout: float = 30.0,
        retry_config: RetryConfig = DEFAULT_RETRY_CONFIG,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username
        self.app_url = app_url
        self.timeout = timeout
        self.retry_config = retry_config

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReportMailer":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_pass,
            sender=settings.sender,
            app_url=settings.public_app_url,
            timeout=settings.smtp_timeout_seconds,
        )

    def is_enabled(self) -> bool:
        return bool(self.host and self.port and self.username and self.password)

    def build_message(
        self,
        to: str,
        inputs: ROIInputs,
        results: ROIResults,
        pdf_bytes: bytes,
    ) -> EmailMessage:
        """Build the report e-mail with the PDF attached."""
        summary = "\n".join(summary_lines(results.to_dict()))

        msg = EmailMessage()
        msg["Subject"] = REPORT_SUBJECT
        msg["From"] = self.sender
        msg["To"] = to
        msg.set_content(
            "Thanks for exploring automation ROI with us!\n\n"
            f"Key results:\n{summary}\n\n"
            f"View more at {self.app_url}."
        )
        msg.add_attachment(
            pdf_bytes,
            maintype="application",
            subtype="pdf",
            filename=REPORT_FILENAME,
        )
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        # Port 465 is implicit TLS; anything else upgrades with STARTTLS
        if int(self.port) == 465:
            server = smtplib.SMTP_SSL(self.host, int(self.port), timeout=self.timeout)
        else:
            server = smtplib.SMTP(self.host, int(self.port), timeout=self.timeout)

        with server:
            if int(self.port) != 465:
                server.starttls()
            server.login(self.username, self.password)
            server.send_message(msg)

    def send_report(
        self,
        to: str,
        inputs: ROIInputs,
        results: ROIResults,
        pdf_bytes: bytes,
    ) -> bool:
        """
        Send a report e-mail.

        Returns:
            False if SMTP is not configured, True once the message is sent

        Raises:
            ValueError: If the recipient address is malformed
            smtplib.SMTPException / OSError: If delivery fails after retries
        """
        if not is_valid_email(to):
            raise ValueError(f"Invalid recipient address: {to!r}")

        if not self.is_enabled():
            logger.info("SMTP not configured, skipping report e-mail", extra={"recipient": to})
            return False

        msg = self.build_message(to, inputs, results, pdf_bytes)
        deliver = retry_with_backoff(self._deliver, config=self.retry_config)
        deliver(msg)

        logger.info("Report e-mail sent", extra={"recipient": to})
        return True


def dispatch_report_email(
    mailer: ReportMailer,
    to: str,
    inputs: ROIInputs,
    results: ROIResults,
    pdf_bytes: bytes,
) -> bool:
    """
    Fire-and-forget wrapper around ReportMailer.send_report.

    Never raises; failures are logged.

    Returns:
        True if the e-mail was sent
    """
    try:
        return mailer.send_report(to, inputs, results, pdf_bytes)
    except Exception as e:
        logger.error(
            f"Failed to send report e-mail: {e}",
            exc_info=True,
            extra={"recipient": to, "error_type": type(e).__name__},
        )
        return False
