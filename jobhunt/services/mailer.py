"""
Outbound email transport built on fastapi-mail.

Accepts (to, subject, text, html) and delivers one multipart/alternative
message. Failures are raised to the caller and never retried here.
"""
import asyncio
import logging

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from fastapi_mail.schemas import MultipartSubtypeEnum
from fastapi_mail.errors import ConnectionErrors

from jobhunt.core import config
from jobhunt.core.errors import ConfigurationError, TransientError

logger = logging.getLogger(__name__)


class MailTransport:
    """Email delivery using the SMTP_* settings."""

    def __init__(
        self,
        host=None,
        port=None,
        username=None,
        password=None,
        sender=None,
        timeout=None,
        suppress_send=None,
    ):
        self.host = host or config.SMTP_HOST
        self.port = port or config.SMTP_PORT
        self.username = username or config.SMTP_USER
        self.password = password or config.SMTP_PASS
        self.sender = sender or config.SMTP_FROM
        self.timeout = timeout or config.SMTP_TIMEOUT
        self.suppress_send = config.MAIL_SUPPRESS_SEND if suppress_send is None else suppress_send

    def connection_config(self) -> ConnectionConfig:
        """
        Connection settings for fastapi-mail.

        Raises:
            ConfigurationError: SMTP settings are missing
        """
        if not (self.host and self.username and self.password and self.sender):
            raise ConfigurationError(
                "SMTP settings are missing. Please set SMTP_HOST, SMTP_USER, SMTP_PASS, SMTP_FROM."
            )

        # 465 is implicit TLS, anything else upgrades with STARTTLS
        implicit_tls = self.port == 465
        return ConnectionConfig(
            MAIL_USERNAME=self.username,
            MAIL_PASSWORD=self.password,
            MAIL_FROM=self.sender,
            MAIL_FROM_NAME=config.APP_NAME,
            MAIL_SERVER=self.host,
            MAIL_PORT=self.port,
            MAIL_STARTTLS=not implicit_tls,
            MAIL_SSL_TLS=implicit_tls,
            USE_CREDENTIALS=True,
            VALIDATE_CERTS=True,
            SUPPRESS_SEND=1 if self.suppress_send else 0,
            TIMEOUT=max(1, int(self.timeout)),
        )

    def build_message(self, to: str, subject: str, text: str, html: str) -> MessageSchema:
        return MessageSchema(
            subject=subject,
            recipients=[to],
            body=html,
            subtype=MessageType.html,
            alternative_body=text,
            multipart_subtype=MultipartSubtypeEnum.alternative,
        )

    def send(self, to: str, subject: str, text: str, html: str) -> None:
        """
        Deliver one email.

        Raises:
            ConfigurationError: SMTP settings are missing
            TransientError: the SMTP exchange failed or timed out
        """
        if self.suppress_send:
            logger.info(f"[MAIL_SUPPRESS_SEND=1] would send: to={to}, subject={subject!r}")
            return

        mail = FastMail(self.connection_config())
        message = self.build_message(to, subject, text, html)
        try:
            # Called from sync route handlers, which run in a worker thread
            asyncio.run(mail.send_message(message))
        except (ConnectionErrors, OSError) as e:
            raise TransientError(f"Email delivery failed: {e}") from e

        logger.info(f"Email sent: to={to}, subject={subject!r}")
