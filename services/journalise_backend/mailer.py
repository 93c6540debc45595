"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
import asyncio
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
import logging
import smtplib
import ssl
import typing
import jinja2
from journalise_backend.exceptions import (EmailDeliveryError,
                                           EmailTemplateNotFoundError)

TEMPLATE_EMAIL_VERIFICATION = "emailVerification"
TEMPLATE_PASSWORD_RESET = "passwordReset"
TEMPLATE_WELCOME = "welcome"
TEMPLATE_PASSWORD_CHANGED = "passwordChanged"
TEMPLATE_LOGIN_WELCOME = "loginWelcome"


@dataclass(frozen=True)
class EmailTemplate:
    """ A named email: Jinja2 template file and default subject. """
    filename: str
    subject: str


EMAIL_TEMPLATES: dict[str, EmailTemplate] = {
    TEMPLATE_EMAIL_VERIFICATION: EmailTemplate(
        "email_verification.html", "Verify Your Email - Journal Platform"),
    TEMPLATE_PASSWORD_RESET: EmailTemplate(
        "password_reset.html",
        "\U0001F512 Password Reset Request - Journal Platform"),
    TEMPLATE_WELCOME: EmailTemplate(
        "welcome.html", "\U0001F389 Welcome to Journal Platform!"),
    TEMPLATE_PASSWORD_CHANGED: EmailTemplate(
        "password_changed.html",
        "✅ Password Changed Successfully - Journal Platform"),
    TEMPLATE_LOGIN_WELCOME: EmailTemplate(
        "login_welcome.html",
        "\U0001F44B Welcome Back to Journal Platform!"),
}

# Extra headers added to every message to help deliverability.
DELIVERABILITY_HEADERS = {
    "X-Priority": "3",
    "X-MSMail-Priority": "Normal",
    "X-Mailer": "Journal Platform",
}


@dataclass(frozen=True)
class MailSettings:
    """ SMTP connection settings, built from the [email] section. """
    host: str
    port: int
    user: typing.Optional[str]
    password: typing.Optional[str]
    sender_name: str = "Journal Platform"
    use_starttls: bool = True
    use_ssl: bool = False
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str


class Mailer:
    """
    Renders the named HTML email templates and delivers them over SMTP.

    ``smtplib`` is blocking, so each delivery opens its own connection in a
    worker thread. Every failure (unknown template, rendering error, SMTP
    or network error, missing credentials) is raised as
    ``EmailDeliveryError``; callers decide whether that is fatal.
    """

    def __init__(self, logger: logging.Logger, settings: MailSettings,
                 environment: typing.Optional[jinja2.Environment] = None):
        self._logger = logger.getChild(__name__)
        self._settings = settings
        self._environment = environment or jinja2.Environment(
            loader=jinja2.PackageLoader("journalise_backend",
                                        "templates/email"),
            autoescape=jinja2.select_autoescape(["html"]),
            undefined=jinja2.StrictUndefined)

    @property
    def settings(self) -> MailSettings:
        return self._settings

    @property
    def is_configured(self) -> bool:
        """ True when SMTP credentials are available. """
        return bool(self._settings.user and self._settings.password)

    def render(self, template: str, data: dict,
               subject: typing.Optional[str] = None) -> RenderedEmail:
        """
        Render a named template.

        Args:
            template (str): Template name, e.g. ``emailVerification``.
            data (dict): Values substituted into the template.
            subject (str): Optional subject overriding the template default.

        Raises:
            EmailTemplateNotFoundError: Unknown template name.
            EmailDeliveryError: The template failed to render.
        """
        definition = EMAIL_TEMPLATES.get(template)
        if definition is None:
            raise EmailTemplateNotFoundError(template)

        try:
            html = self._environment.get_template(definition.filename) \
                .render(**data)
        except jinja2.TemplateError as ex:
            raise EmailDeliveryError(
                f"Failed to render email template '{template}': {ex}",
                template) from ex

        return RenderedEmail(subject=subject or definition.subject, html=html)

    def build_message(self, to: str, rendered: RenderedEmail) -> MIMEMultipart:
        """ Assemble the MIME message for a rendered email. """
        message = MIMEMultipart("alternative")
        message["From"] = formataddr((self._settings.sender_name,
                                      self._settings.user or ""))
        message["To"] = to
        message["Subject"] = rendered.subject
        message["Message-ID"] = make_msgid(domain="journalise")
        for header, value in DELIVERABILITY_HEADERS.items():
            message[header] = value
        message.attach(MIMEText(rendered.html, "html", "utf-8"))
        return message

    async def send(self, to: str, template: str, data: dict,
                   subject: typing.Optional[str] = None) -> str:
        """
        Render and deliver an email.

        Returns:
            str: The Message-ID of the delivered email.

        Raises:
            EmailDeliveryError: On any rendering or delivery failure.
        """
        self._logger.info("Sending '%s' email to %s", template, to)

        if not self.is_configured:
            raise EmailDeliveryError("Email credentials not configured",
                                     template)

        rendered = self.render(template, data, subject)
        message = self.build_message(to, rendered)

        try:
            await asyncio.to_thread(self._deliver, message)

        except (smtplib.SMTPException, OSError) as ex:
            self._logger.error("Email '%s' to %s failed: %s",
                               template, to, ex)
            raise EmailDeliveryError(f"Failed to send email: {ex}",
                                     template) from ex

        self._logger.info("Email '%s' sent to %s (%s)", template, to,
                          message["Message-ID"])
        return message["Message-ID"]

    async def verify_connection(self) -> bool:
        """
        Check that the SMTP server accepts our credentials.

        Problems are logged with a hint on how to fix them; nothing is
        raised.
        """
        if not self.is_configured:
            self._logger.warning(
                "Email service setup required: set EMAIL_USER and "
                "EMAIL_PASSWORD (and EMAIL_HOST / EMAIL_PORT if not using "
                "smtp.gmail.com:587). Gmail accounts need an app password.")
            return False

        try:
            await asyncio.to_thread(self._check_connection)

        except smtplib.SMTPAuthenticationError as ex:
            self._logger.error("Email service authentication failed (%s): "
                               "check EMAIL_USER / EMAIL_PASSWORD", ex)
            return False

        except (smtplib.SMTPException, OSError) as ex:
            self._logger.error("Email service connection to %s:%d failed "
                               "(%s): check network, firewall and SMTP port",
                               self._settings.host, self._settings.port, ex)
            return False

        self._logger.info("Email service is ready (%s:%d)",
                          self._settings.host, self._settings.port)
        return True

    def _open_connection(self) -> smtplib.SMTP:
        # Implicit TLS (port 465) wraps the socket before the SMTP greeting.
        if self._settings.use_ssl:
            connection = smtplib.SMTP_SSL(
                self._settings.host, self._settings.port,
                timeout=self._settings.timeout_seconds,
                context=ssl.create_default_context())
        else:
            connection = smtplib.SMTP(self._settings.host,
                                      self._settings.port,
                                      timeout=self._settings.timeout_seconds)
        try:
            if self._settings.use_starttls and not self._settings.use_ssl:
                connection.starttls(context=ssl.create_default_context())
            connection.login(self._settings.user, self._settings.password)
        except (smtplib.SMTPException, OSError):
            connection.close()
            raise
        return connection

    def _deliver(self, message: MIMEMultipart) -> None:
        with self._open_connection() as connection:
            connection.send_message(message)

    def _check_connection(self) -> None:
        with self._open_connection() as connection:
            connection.noop()
