import pytest

from eduhub.services.mailer import EmailSender, MailDeliveryError, MailQueue


class RecordingSender:
    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.delivered = []

    def send_email(self, recipient_email, subject, body, html_content=None):
        if recipient_email in self.fail_for:
            raise MailDeliveryError(f'Could not deliver mail to {recipient_email}')
        self.delivered.append((recipient_email, subject))


def test_mail_queue_counts_failures_without_raising() -> None:
    sender = RecordingSender(fail_for={'bounce@example.edu'})
    queue = MailQueue(sender, max_workers=1)

    queue.submit('ok@example.edu', 'Hello', 'Body')
    failed = queue.submit('bounce@example.edu', 'Hello', 'Body')
    queue.shutdown(wait=True)

    assert isinstance(failed.exception(), MailDeliveryError)
    assert sender.delivered == [('ok@example.edu', 'Hello')]
    assert queue.sent_count == 1
    assert queue.failed_count == 1


def test_mail_queue_logs_failures(caplog: pytest.LogCaptureFixture) -> None:
    queue = MailQueue(RecordingSender(fail_for={'bounce@example.edu'}), max_workers=1)

    with caplog.at_level('ERROR', logger='eduhub.services.mailer'):
        queue.submit('bounce@example.edu', 'Password Reset', 'Body')
        queue.shutdown(wait=True)

    assert 'Password Reset' in caplog.text
    assert 'bounce@example.edu' in caplog.text


def test_email_sender_refuses_incomplete_configuration() -> None:
    sender = EmailSender(server='', username='', password='')

    with pytest.raises(MailDeliveryError):
        sender.send_email('student@example.edu', 'Subject', 'Body')
