import logging

import pytest

from civitasfix.logging_config import get_user_id

from .conftest import auth_headers


class UserIdRecorder(logging.Handler):
    """Remembers which user id was in context when each record was emitted."""

    def __init__(self):
        super().__init__()
        self.seen = []

    def emit(self, record):
        self.seen.append((record.getMessage(), get_user_id()))


@pytest.fixture
def workflow_log():
    recorder = UserIdRecorder()
    logger = logging.getLogger("civitasfix.workflow")
    logger.addHandler(recorder)
    yield recorder
    logger.removeHandler(recorder)


def test_workflow_logs_carry_the_caller_id(client, student, lecturer, create_report, workflow_log):
    report = create_report(student)
    client.patch(
        f"/reports/{report['id']}/status",
        json={"status": "CONFIRMED"},
        headers=auth_headers(lecturer),
    )

    created = [uid for msg, uid in workflow_log.seen if "created by user" in msg]
    moved = [uid for msg, uid in workflow_log.seen if "moved PENDING -> CONFIRMED" in msg]
    assert created == [str(student.id)]
    assert moved == [str(lecturer.id)]

