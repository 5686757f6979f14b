import logging
import smtplib
from concurrent.futures import Future, ThreadPoolExecutor
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from threading import Lock

from eduhub.core import config

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    pass


class EmailSender:
    """Sends plain-text (and optionally HTML) mail over SMTP with STARTTLS."""

    def __init__(
        self,
        server: str = config.SMTP_SERVER,
        port: int = config.SMTP_PORT,
        username: str = config.SMTP_USERNAME,
        password: str = config.SMTP_PASSWORD,
        sender: str = config.SENDER_EMAIL,
        timeout: int = config.MAIL_SEND_TIMEOUT_SECONDS,
    ) -> None:
        self.server = server
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.timeout = timeout

    def send_email(
        self,
        recipient_email: str,
        subject: str,
        body: str,
        html_content: str | None = None,
    ) -> None:
        if not all([self.server, self.port, self.username, self.password, self.sender]):
            raise MailDeliveryError("Email configuration is incomplete. Check SMTP_* environment variables.")

        msg = MIMEMultipart("alternative")
        msg["From"] = self.sender
        msg["To"] = recipient_email
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "plain"))
        if html_content:
            msg.attach(MIMEText(html_content, "html"))

        try:
            with smtplib.SMTP(self.server, self.port, timeout=self.timeout) as server:
                server.starttls()
                server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise MailDeliveryError(f"Could not deliver mail to {recipient_email}") from exc

        logger.info("Email sent successfully to %s", recipient_email)


class MailQueue:
    """Best-effort mail delivery on a bounded pool of worker threads.

    Callers never see delivery errors; they are logged and counted in
    ``failed_count`` instead.
    """

    def __init__(self, sender: EmailSender, max_workers: int = config.MAIL_MAX_WORKERS) -> None:
        self.sender = sender
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="mail")
        self._lock = Lock()
        self.sent_count = 0
        self.failed_count = 0

    def submit(
        self,
        recipient_email: str,
        subject: str,
        body: str,
        html_content: str | None = None,
    ) -> Future:
        future = self._executor.submit(
            self.sender.send_email, recipient_email, subject, body, html_content
        )
        future.add_done_callback(lambda done: self._record(done, recipient_email, subject))
        return future

    def _record(self, future: Future, recipient_email: str, subject: str) -> None:
        exc = future.exception()
        with self._lock:
            if exc is None:
                self.sent_count += 1
                return
            self.failed_count += 1
        logger.error("Failed to send %r to %s: %s", subject, recipient_email, exc)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


mail_queue = MailQueue(EmailSender())


def get_mail_queue() -> MailQueue:
    return mail_queue
