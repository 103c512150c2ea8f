"""Report delivery by e-mail."""

from .mailer import ReportMailer, dispatch_report_email, is_valid_email

__all__ = ["ReportMailer", "dispatch_report_email", "is_valid_email"]
