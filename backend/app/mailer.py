"""Outbound email delivery over SMTP.

Transport errors never escape :meth:`Mailer.send`; they are logged and mapped
to a :class:`DeliveryResult` carrying the failure reason so callers can tell a
bad recipient from an unreachable server.
"""
from __future__ import annotations

import logging
import os
import smtplib
import socket
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr
from enum import Enum
from typing import Optional

from dotenv import load_dotenv

load_dotenv()
logger = logging.getLogger(__name__)


class DeliveryFailure(str, Enum):
    TRANSIENT_NETWORK = "transient_network"
    AUTH_REJECTED = "auth_rejected"
    INVALID_RECIPIENT = "invalid_recipient"
    REJECTED = "rejected"
    NOT_CONFIGURED = "not_configured"


@dataclass(frozen=True)
class Attachment:
    content: bytes
    filename: str
    mime_type: str = "application/pdf"


@dataclass(frozen=True)
class DeliveryResult:
    ok: bool
    reason: Optional[DeliveryFailure] = None
    detail: Optional[str] = None

    @classmethod
    def success(cls) -> "DeliveryResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, reason: DeliveryFailure, detail: Optional[str] = None) -> "DeliveryResult":
        return cls(ok=False, reason=reason, detail=detail)


def classify_smtp_error(exc: Exception) -> DeliveryFailure:
    # l'ordre compte : sous-classes smtplib avant OSError
    if isinstance(exc, smtplib.SMTPAuthenticationError):
        return DeliveryFailure.AUTH_REJECTED
    if isinstance(exc, smtplib.SMTPRecipientsRefused):
        return DeliveryFailure.INVALID_RECIPIENT
    if isinstance(exc, (smtplib.SMTPServerDisconnected, smtplib.SMTPConnectError)):
        return DeliveryFailure.TRANSIENT_NETWORK
    if isinstance(exc, smtplib.SMTPResponseException) and 400 <= exc.smtp_code < 500:
        return DeliveryFailure.TRANSIENT_NETWORK
    if isinstance(exc, smtplib.SMTPException):
        return DeliveryFailure.REJECTED
    if isinstance(exc, (socket.timeout, ConnectionError, OSError)):
        return DeliveryFailure.TRANSIENT_NETWORK
    return DeliveryFailure.REJECTED


class Mailer(ABC):
    @abstractmethod
    def send(self, to: str, subject: str, html_body: str,
             attachment: Optional[Attachment] = None) -> DeliveryResult:
        ...


@dataclass
class SmtpMailer(Mailer):
    host: Optional[str]
    port: int = 587
    username: Optional[str] = None
    password: Optional[str] = None
    from_address: Optional[str] = None
    from_name: str = "Offer Desk"
    use_tls: bool = True
    timeout: float = 30.0

    def __post_init__(self):
        # expéditeur par défaut : le compte SMTP
        self.from_address = self.from_address or self.username

    @classmethod
    def from_env(cls) -> "SmtpMailer":
        username = os.getenv("SMTP_USERNAME")
        return cls(
            host=os.getenv("SMTP_HOST"),
            port=int(os.getenv("SMTP_PORT", "587")),
            username=username,
            password=os.getenv("SMTP_PASSWORD"),
            from_address=os.getenv("MAIL_FROM_ADDRESS"),
            from_name=os.getenv("MAIL_FROM_NAME", "Offer Desk"),
            use_tls=os.getenv("SMTP_USE_TLS", "true").lower() not in ("0", "false", "no"),
        )

    def build_message(self, to: str, subject: str, html_body: str,
                      attachment: Optional[Attachment] = None) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = formataddr((self.from_name, self.from_address or ""))
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(html_body, subtype="html")
        if attachment is not None:
            maintype, _, subtype = attachment.mime_type.partition("/")
            msg.add_attachment(
                attachment.content, maintype=maintype, subtype=subtype or "octet-stream",
                filename=attachment.filename,
            )
        return msg

    def send(self, to: str, subject: str, html_body: str,
             attachment: Optional[Attachment] = None) -> DeliveryResult:
        if not self.host or not self.from_address:
            logger.warning("SMTP not configured, email to %s not sent", to)
            return DeliveryResult.failure(DeliveryFailure.NOT_CONFIGURED, "SMTP_HOST / sender missing")
        msg = self.build_message(to, subject, html_body, attachment)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.username:
                    server.login(self.username, self.password or "")
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            reason = classify_smtp_error(e)
            logger.warning("email to %s failed (%s): %s", to, reason.value, e)
            return DeliveryResult.failure(reason, str(e))
        logger.info("email %r sent to %s", subject, to)
        return DeliveryResult.success()
