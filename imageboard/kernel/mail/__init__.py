"""
Outbound mail: transports and the per-job outbox.
"""

from imageboard.kernel.mail.mailer import (
    MailMessage,
    Mailer,
    MailOutbox,
    MemoryMailer,
    SmtpMailer,
    build_mailer,
)

__all__ = [
    "MailMessage",
    "Mailer",
    "MailOutbox",
    "MemoryMailer",
    "SmtpMailer",
    "build_mailer",
]
