from sqlalchemy.orm import sessionmaker

from classhub.services import classroom_service, mail_service
from classhub.workers import tasks
from tests.conftest import make_user


def test_notify_classroom_mails_every_member(engine, db_session, classroom, student, monkeypatch):
    phone_only = make_user(db_session, name="No Mail", role="student", phone="777")
    bounced = make_user(db_session, name="Bounced", role="student", email="bounce@test.com")
    for user in (student, phone_only, bounced):
        classroom_service.join_classroom(db_session, classroom=classroom, user=user)

    sent = []

    def fake_send(to, subject, text):
        if to == "bounce@test.com":
            raise mail_service.MailError("mailbox unavailable")
        sent.append((to, subject, text))

    monkeypatch.setattr(tasks, "SessionLocal", sessionmaker(bind=engine))
    monkeypatch.setattr(tasks, "send_mail", fake_send)

    result = tasks.notify_classroom_task(classroom.id, "New lecture uploaded: intro.mp4")

    assert sent == [("student@test.com", "Classroom Update", "New lecture uploaded: intro.mp4")]
    assert result == {
        "status": "partial",
        "classroom_id": classroom.id,
        "sent": 1,
        "failed": 1,
    }


def test_enqueue_uses_notifications_queue(monkeypatch):
    from classhub.workers import queue

    captured = {}

    class FakeJob:
        id = "job-42"

    class FakeQueue:
        def __init__(self, name, connection=None):
            captured["name"] = name

        def enqueue(self, func, *args, **kwargs):
            captured["func"] = func
            captured["args"] = args
            return FakeJob()

    monkeypatch.setattr(queue, "Queue", FakeQueue)
    monkeypatch.setattr(queue, "get_redis_connection", lambda: object())

    assert queue.enqueue_classroom_notification(3, "hello") == "job-42"
    assert captured["name"] == "notifications"
    assert captured["func"] is tasks.notify_classroom_task
    assert captured["args"] == (3, "hello")
