"""
Unit Tests for the Session Table
"""
import pytest

from md_mcp_server.sessions import SessionLimitError, SessionTable


class TestSessionTable:
    """Tests for bounded session bookkeeping."""

    def test_create_and_get(self):
        table = SessionTable(max_sessions=2)
        session = table.create(client_name="inspector", protocol_version="2025-06-18")

        assert table.get(session.session_id) is session
        assert session.session_id in table
        assert len(session.session_id) == 32
        assert len(table) == 1

    def test_ids_are_unique(self):
        table = SessionTable(max_sessions=5)
        ids = {table.create().session_id for _ in range(5)}
        assert len(ids) == 5

    def test_limit_enforced(self):
        table = SessionTable(max_sessions=1)
        table.create()
        with pytest.raises(SessionLimitError):
            table.create()

    def test_close_frees_a_slot(self):
        table = SessionTable(max_sessions=1)
        session = table.create()

        assert table.close(session.session_id) is True
        assert table.close(session.session_id) is False
        assert table.create() is not None

    @pytest.mark.parametrize("session_id", [None, "", "missing"])
    def test_unknown_ids(self, session_id):
        assert SessionTable(max_sessions=1).get(session_id) is None

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            SessionTable(max_sessions=0)
