"""SMTP transport for single notification emails and digests."""

import html
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any

from django.conf import settings
from django.template import TemplateDoesNotExist
from django.template.loader import render_to_string
from django.utils.html import strip_tags

import structlog
from pydantic import EmailStr, TypeAdapter, ValidationError

logger = structlog.get_logger(__name__)

_email_adapter = TypeAdapter(EmailStr)


class EmailService:
    """Render notification templates and send them as multipart emails.

    Templates come in pairs: ``<name>.html`` is required, ``<name>.txt``
    is optional and used for the plain text part. Without it the plain
    part is derived from the HTML.
    """

    def __init__(self) -> None:
        """Read SMTP configuration from Django settings."""
        self.smtp_host = settings.EMAIL_HOST
        self.smtp_port = settings.EMAIL_PORT
        self.smtp_user = settings.EMAIL_HOST_USER
        self.smtp_password = settings.EMAIL_HOST_PASSWORD
        self.use_tls = settings.EMAIL_USE_TLS
        self.timeout = settings.EMAIL_TIMEOUT
        self.from_email = settings.DEFAULT_FROM_EMAIL

    def send_template_email(
        self,
        to_email: str,
        subject: str,
        template_name: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Render a notification template pair and send it.

        Args:
            to_email: Recipient email address
            subject: Email subject line
            template_name: HTML template path, e.g.
                'notifications/email/digest.html'
            context: Template context variables

        Raises:
            ValueError: If email address is invalid
            smtplib.SMTPException: If SMTP operation fails
            django.template.TemplateDoesNotExist: If the HTML template is missing
        """
        context = context or {}
        html_content = render_to_string(template_name, context)
        plain_content = self._render_plain(template_name, context, html_content)
        self.send_email(
            to_email=to_email,
            subject=subject,
            html_content=html_content,
            plain_content=plain_content,
        )

    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        plain_content: str | None = None,
    ) -> None:
        """Send one multipart email.

        Raises:
            ValueError: If email address is invalid
            smtplib.SMTPException: If SMTP operation fails
        """
        if not self.is_valid_email(to_email):
            raise ValueError(f"Invalid email address: {to_email}")

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = to_email
        msg.attach(MIMEText(plain_content or self._html_to_plain(html_content), "plain"))
        msg.attach(MIMEText(html_content, "html"))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.smtp_user and self.smtp_password:
                    server.login(self.smtp_user, self.smtp_password)
                server.send_message(msg)
        except smtplib.SMTPException as e:
            logger.error(
                "email_send_failed",
                to_email=to_email,
                subject=subject,
                error=str(e),
            )
            raise

        logger.info("email_sent", to_email=to_email, subject=subject)

    @staticmethod
    def is_valid_email(email: str | None) -> bool:
        """Check an address with the same rules the API applies to EmailStr."""
        if not email:
            return False
        try:
            _email_adapter.validate_python(email)
        except ValidationError:
            return False
        return True

    def _render_plain(
        self, template_name: str, context: dict[str, Any], html_content: str
    ) -> str:
        text_template = template_name.removesuffix(".html") + ".txt"
        try:
            return render_to_string(text_template, context).strip()
        except TemplateDoesNotExist:
            return self._html_to_plain(html_content)

    @staticmethod
    def _html_to_plain(html_content: str) -> str:
        lines = (line.strip() for line in html.unescape(strip_tags(html_content)).splitlines())
        return "\n".join(line for line in lines if line)
