from fastapi import BackgroundTasks

from authcore.domain.interfaces import OutgoingEmail
from authcore.infrastructure.delivery import BackgroundMailDispatcher, deliver_with_retry
from authcore.infrastructure.mailer import verification_email

from conftest import RecordingSender

MESSAGE = OutgoingEmail(to="a@x.com", subject="Code", html_body="<p>123456</p>")


def test_delivers_on_first_attempt():
    sender = RecordingSender()
    assert deliver_with_retry(sender, MESSAGE, sleep=lambda _: None) is True
    assert sender.sent == [("a@x.com", "Code", "<p>123456</p>")]


def test_retries_with_backoff_until_success():
    sender = RecordingSender(failures=2)
    delays = []

    assert deliver_with_retry(sender, MESSAGE, max_attempts=3, base_delay=1.0, jitter=False, sleep=delays.append)

    assert sender.calls == 3
    assert delays == [1.0, 2.0]
    assert len(sender.sent) == 1


def test_exhausted_retries_are_swallowed(caplog):
    sender = RecordingSender(failures=5)

    with caplog.at_level("ERROR"):
        delivered = deliver_with_retry(sender, MESSAGE, max_attempts=3, sleep=lambda _: None)

    assert delivered is False
    assert sender.calls == 3
    assert "Email delivery exhausted" in caplog.text


def test_dispatcher_queues_background_task():
    tasks = BackgroundTasks()
    sender = RecordingSender()
    dispatch = BackgroundMailDispatcher(tasks, sender, max_attempts=2, base_delay=0.0)

    dispatch(MESSAGE)

    assert len(tasks.tasks) == 1
    assert sender.calls == 0
    task = tasks.tasks[0]
    task.func(*task.args, **task.kwargs)
    assert sender.sent[0][0] == "a@x.com"


def test_verification_email_mentions_code_and_window():
    message = verification_email("a@x.com", "654321", app_name="Eco <Shop>", ttl_minutes=10)
    assert message.to == "a@x.com"
    assert "654321" in message.html_body
    assert "10 minutes" in message.html_body
    assert "Eco &lt;Shop&gt;" in message.html_body
