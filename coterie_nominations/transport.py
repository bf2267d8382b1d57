"""
Mail Transport Configuration

Handles transport selection from the environment and the two supported
backends: the Resend email API and direct SMTP submission. Both expose the
same single operation, send(message), which returns a provider message id or
raises TransportError.
"""

import logging
import os
from abc import ABC, abstractmethod
import smtplib
import ssl
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import parseaddr
from typing import Optional

import resend

from .models import EmailMessage

# Configure logging
logger = logging.getLogger(__name__)


class TransportError(Exception):
    """A send was rejected by the provider or failed on the network"""

    def __init__(self, message: str, recipient: Optional[str] = None):
        self.recipient = recipient
        super().__init__(message)


class TransportConfig:
    """Mail transport configuration management"""

    def __init__(self):
        # Backend selection: "resend", "smtp" or empty for auto-detection
        self.backend = os.getenv("EMAIL_TRANSPORT", "").strip().lower()

        # Resend API
        self.resend_api_key = os.getenv("RESEND_API_KEY")

        # SMTP submission
        self.smtp_host = os.getenv("SMTP_HOST")
        self.config_errors = []
        self.smtp_port = self._int_setting("SMTP_PORT", 587)
        self.smtp_username = os.getenv("SMTP_USER")
        self.smtp_password = os.getenv("SMTP_PASSWORD")
        self.smtp_use_tls = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
        self.smtp_timeout = self._int_setting("SMTP_TIMEOUT", 30)

    def _int_setting(self, name: str, default: int) -> int:
        """Read an integer variable, recording a config error instead of raising"""
        raw = os.getenv(name)
        if raw is None:
            return default
        try:
            return int(raw.strip())
        except ValueError:
            self.config_errors.append(f"Invalid {name}: {raw!r} is not a number")
            return default

    @property
    def selected_backend(self) -> str:
        """Resolve the backend, preferring Resend when a key is present"""
        if self.backend:
            return self.backend
        if self.resend_api_key:
            return "resend"
        if self.smtp_host:
            return "smtp"
        return "resend"

    def validate_config(self) -> tuple[bool, Optional[str]]:
        """Validate transport configuration"""
        if self.config_errors:
            return False, "; ".join(self.config_errors)

        backend = self.selected_backend
        if backend == "resend":
            if not self.resend_api_key:
                return False, "RESEND_API_KEY is required for the resend transport"
        elif backend == "smtp":
            if not self.smtp_host:
                return False, "SMTP_HOST is required for the smtp transport"
            if self.smtp_port <= 0:
                return False, f"Invalid SMTP_PORT: {self.smtp_port}"
        else:
            return False, f"Unknown EMAIL_TRANSPORT: {backend!r} (expected 'resend' or 'smtp')"

        return True, None


class MailTransport(ABC):
    """Base class for mail transports"""

    name = "base"

    @abstractmethod
    def send(self, message: EmailMessage) -> str:
        """Submit one message; return the provider message id"""


class UnconfiguredTransport(MailTransport):
    """Stand-in used when no backend is configured; every send fails"""

    name = "unconfigured"

    def __init__(self, reason: str):
        self.reason = reason

    def send(self, message: EmailMessage) -> str:
        raise TransportError(f"No mail transport configured: {self.reason}", recipient=message.to)


class ResendTransport(MailTransport):
    """
    Send through the Resend transactional email API

    The resend SDK keeps its API key in a module global, so only one key can
    be active per process. Creating a second transport with a different key
    raises instead of silently redirecting the first one's sends.
    """

    name = "resend"

    # Key installed into the resend SDK by the first instance
    _installed_key: Optional[str] = None

    def __init__(self, api_key: str):
        installed = ResendTransport._installed_key
        if installed is not None and installed != api_key:
            raise ValueError("A ResendTransport with a different API key is already active in this process")
        self.api_key = api_key
        resend.api_key = api_key
        ResendTransport._installed_key = api_key

    def send(self, message: EmailMessage) -> str:
        params = {
            "from": message.from_address,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html_body,
        }
        if message.reply_to:
            params["reply_to"] = message.reply_to

        try:
            response = resend.Emails.send(params)
        except Exception as e:
            raise TransportError(f"Resend rejected email: {e}", recipient=message.to) from e

        message_id = response.get("id", "") if isinstance(response, dict) else str(response)
        logger.debug(f"Resend accepted email {message_id}")
        return message_id


class SmtpTransport(MailTransport):
    """Send by direct SMTP submission"""

    name = "smtp"

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: int = 30,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def _build_mime(self, message: EmailMessage) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = message.from_address
        msg["To"] = message.to
        if message.reply_to:
            msg["Reply-To"] = message.reply_to
        msg.attach(MIMEText(message.html_body, "html", "utf-8"))
        return msg

    def _connect(self) -> smtplib.SMTP:
        if self.port == 465:
            context = ssl.create_default_context()
            return smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout)

        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        if self.use_tls:
            server.starttls(context=ssl.create_default_context())
        return server

    def send(self, message: EmailMessage) -> str:
        msg = self._build_mime(message)
        envelope_from = parseaddr(message.from_address)[1] or message.from_address

        try:
            with self._connect() as server:
                if self.username:
                    server.login(self.username, self.password or "")
                server.sendmail(envelope_from, [message.to], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise TransportError(f"SMTP submission via {self.host} failed: {e}", recipient=message.to) from e

        return f"smtp-{datetime.now(timezone.utc).timestamp()}"


def build_transport(config: Optional[TransportConfig] = None) -> MailTransport:
    """
    Create the transport named by the configuration

    Raises:
        ValueError: If the configuration is invalid
    """
    config = config or TransportConfig()
    is_valid, error_msg = config.validate_config()
    if not is_valid:
        raise ValueError(f"Transport configuration error: {error_msg}")

    if config.selected_backend == "smtp":
        logger.info(f"Using SMTP transport via {config.smtp_host}:{config.smtp_port}")
        return SmtpTransport(
            host=config.smtp_host,
            port=config.smtp_port,
            username=config.smtp_username,
            password=config.smtp_password,
            use_tls=config.smtp_use_tls,
            timeout=config.smtp_timeout,
        )

    logger.info("Using Resend API transport")
    return ResendTransport(api_key=config.resend_api_key)
