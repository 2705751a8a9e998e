from __future__ import annotations

import logging
import smtplib
import ssl
import time
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Callable

from .model import Message, SendResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SmtpConfig:
    host: str
    port: int
    user: str
    password: str
    sender: str
    use_ssl: bool = False
    timeout: int = 30

    @classmethod
    def from_dict(cls, cfg: dict) -> "SmtpConfig":
        return cls(
            host=str(cfg.get("host", "")),
            port=int(cfg.get("port", 587)),
            user=str(cfg.get("user", "")),
            password=str(cfg.get("password", "")),
            sender=str(cfg.get("sender") or cfg.get("user", "")),
            use_ssl=bool(cfg.get("use_ssl", False)),
            timeout=int(cfg.get("timeout", 30)),
        )

    @property
    def is_complete(self) -> bool:
        return all([self.host, self.port, self.user, self.password, self.sender])


class SmtpMailer:
    """SMTP transport for notification messages.

    Connection-level failures are retried with a linear backoff; anything
    else raises so the caller can record it.
    """

    def __init__(self, config: SmtpConfig, *, max_retries: int = 3, sleep: Callable[[float], None] = time.sleep):
        self._config = config
        self._max_retries = max(1, int(max_retries))
        self._sleep = sleep

    def _connect(self) -> smtplib.SMTP:
        cfg = self._config
        if not cfg.is_complete:
            raise RuntimeError("Missing SMTP configuration parameters")

        context = ssl.create_default_context()
        if cfg.use_ssl:
            server = smtplib.SMTP_SSL(cfg.host, cfg.port, context=context, timeout=cfg.timeout)
        else:
            server = smtplib.SMTP(cfg.host, cfg.port, timeout=cfg.timeout)

        try:
            if not cfg.use_ssl:
                server.starttls(context=context)
            server.login(cfg.user, cfg.password)
        except Exception:
            server.close()
            raise
        return server

    def _build(self, message: Message) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self._config.sender
        msg["To"] = message.to
        msg["Subject"] = message.subject
        msg["Message-ID"] = make_msgid(domain=self._config.sender.rpartition("@")[2] or None)
        msg.set_content(message.text or "Please view this message in an HTML-capable email client.")
        msg.add_alternative(message.html, subtype="html")
        return msg

    def send(self, message: Message) -> SendResult:
        msg = self._build(message)

        attempt = 1
        while True:
            try:
                with self._connect() as server:
                    rejected = server.send_message(msg)
                break
            except (smtplib.SMTPConnectError, smtplib.SMTPServerDisconnected, ConnectionError, TimeoutError) as e:
                if attempt >= self._max_retries:
                    raise
                wait_time = attempt * 2
                logger.warning(
                    "SMTP connection failed (attempt %d/%d): %s; retrying in %ss",
                    attempt, self._max_retries, e, wait_time,
                )
                self._sleep(wait_time)
                attempt += 1

        if rejected:
            return SendResult(success=False, error=f"recipient refused: {', '.join(rejected)}")
        logger.info("Email sent to %s", message.to)
        return SendResult(success=True, message_id=msg["Message-ID"])

    def verify(self) -> bool:
        """Open and authenticate one connection; raises on failure."""
        with self._connect() as server:
            server.noop()
        return True
