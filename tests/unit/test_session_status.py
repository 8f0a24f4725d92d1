"""
Unit tests for session status transitions

Transitions are unrestricted; leaving a terminal status only logs a warning.
"""

import logging
import uuid

import pytest

from app.models import SessionStatus, TERMINAL_STATUSES, TutoringSession
from app.services.session_service import transition_status


def make_session(status):
    return TutoringSession(
        id=uuid.uuid4(),
        student_id=uuid.uuid4(),
        peer_id=uuid.uuid4(),
        status=status.value,
    )


class TestTransitionStatus:
    """Test open status transitions"""

    @pytest.mark.parametrize("current", list(SessionStatus))
    @pytest.mark.parametrize("target", list(SessionStatus))
    def test_any_transition_allowed(self, current, target):
        record = make_session(current)

        previous = transition_status(record, target)

        assert previous == current
        assert record.status == target.value
        assert record.updated_at is not None

    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {SessionStatus.COMPLETED, SessionStatus.CANCELLED}

    def test_leaving_terminal_logs_warning(self, caplog):
        record = make_session(SessionStatus.COMPLETED)

        with caplog.at_level(logging.WARNING, logger="app.services.session_service"):
            transition_status(record, SessionStatus.ACTIVE)

        assert record.status == "active"
        assert "leaving terminal status" in caplog.text

    def test_normal_transition_no_warning(self, caplog):
        record = make_session(SessionStatus.PENDING)

        with caplog.at_level(logging.WARNING, logger="app.services.session_service"):
            transition_status(record, SessionStatus.COMPLETED)

        assert caplog.records == []

    def test_unknown_status_rejected(self):
        with pytest.raises(ValueError):
            SessionStatus("archived")
