"""
Outbound mail.

Jobs never talk to a Mailer directly: they queue messages on a MailOutbox,
and the dispatcher delivers the outbox as the last step inside the job's
transaction. A job that fails before that sends nothing; a transport
failure rolls the job back.
"""

import asyncio
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.message import EmailMessage
from typing import List

from imageboard.config import Settings
from imageboard.kernel.errors import ServiceUnavailableError
from imageboard.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class MailMessage:
    to: str
    subject: str
    body: str


class Mailer(ABC):
    """Mail transport."""

    @abstractmethod
    async def send(self, message: MailMessage) -> None:
        ...


class SmtpMailer(Mailer):
    """Sends through an SMTP relay (STARTTLS when credentials are set)."""

    def __init__(self, settings: Settings):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.user = settings.smtp_user
        self.password = settings.smtp_password
        self.from_email = settings.smtp_from_email

    def _send_blocking(self, message: MailMessage) -> None:
        email = EmailMessage()
        email["From"] = self.from_email
        email["To"] = message.to
        email["Subject"] = message.subject
        email.set_content(message.body)

        with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
            if self.user:
                smtp.starttls()
                smtp.login(self.user, self.password)
            smtp.send_message(email)

    async def send(self, message: MailMessage) -> None:
        await asyncio.to_thread(self._send_blocking, message)
        logger.info("Mail sent", extra={"to": message.to, "subject": message.subject})


class MemoryMailer(Mailer):
    """Keeps messages in memory instead of sending them (development, tests)."""

    def __init__(self) -> None:
        self.sent: List[MailMessage] = []

    @property
    def mail_counter(self) -> int:
        return len(self.sent)

    async def send(self, message: MailMessage) -> None:
        self.sent.append(message)
        logger.debug("Mail recorded", extra={"to": message.to, "subject": message.subject})


class MailOutbox:
    """Messages queued by one job run."""

    def __init__(self) -> None:
        self._queue: List[MailMessage] = []

    def queue(self, message: MailMessage) -> None:
        self._queue.append(message)

    async def deliver(self, mailer: Mailer) -> int:
        """
        Send every queued message in order; returns how many were sent.

        Raises:
            ServiceUnavailableError: The transport failed
        """
        sent = 0
        while self._queue:
            message = self._queue.pop(0)
            try:
                await mailer.send(message)
            except (OSError, smtplib.SMTPException) as exc:
                logger.warning("Mail delivery failed: %s", exc, extra={"to": message.to})
                raise ServiceUnavailableError("Mail could not be sent") from exc
            sent += 1
        return sent


def build_mailer(settings: Settings) -> Mailer:
    if settings.mail_backend == "memory":
        return MemoryMailer()
    return SmtpMailer(settings)
