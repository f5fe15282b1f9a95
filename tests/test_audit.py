import logging

import pytest

from quill.journal.audit import LoggingAuditSink, record_audit
from quill.journal.exceptions import AuditSinkFailure


class BrokenSink:
    async def record(self, action, resource_id, details):
        raise RuntimeError("sink offline")


class RejectingSink:
    async def record(self, action, resource_id, details):
        raise AuditSinkFailure("audit store is read-only")


class ErrorRecorder(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.ERROR)
        self.messages = []

    def emit(self, record):
        self.messages.append(record.getMessage())


@pytest.fixture
def audit_errors():
    """Error messages logged on the audit logger during the test."""
    handler = ErrorRecorder()
    audit_logger = logging.getLogger("quill.journal.audit")
    audit_logger.addHandler(handler)
    yield handler.messages
    audit_logger.removeHandler(handler)


@pytest.mark.asyncio
class TestRecordAudit:
    async def test_records_to_sink(self, audit_errors):
        sink = LoggingAuditSink()

        ok = await record_audit(sink, "CREATE", "res-1", {"entryCount": 2})

        assert ok is True
        assert sink.records == [("CREATE", "res-1", {"entryCount": 2})]
        assert audit_errors == []

    async def test_failure_is_swallowed_and_logged(self, audit_errors):
        ok = await record_audit(BrokenSink(), "CREATE", None, {"note": "x"})

        assert ok is False
        assert audit_errors == ["Audit sink rejected CREATE record: RuntimeError"]

    async def test_sink_raised_failure_is_logged(self, audit_errors):
        ok = await record_audit(RejectingSink(), "CREATE", None, {})

        assert ok is False
        assert audit_errors == ["audit store is read-only"]

    async def test_no_sink(self):
        assert await record_audit(None, "CREATE", None, {}) is False
