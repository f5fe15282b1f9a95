import logging
from typing import TYPE_CHECKING, Any

from quill.journal.exceptions import AuditSinkFailure

if TYPE_CHECKING:
    from quill.journal.store.base import AuditSink

logger = logging.getLogger(__name__)


class LoggingAuditSink:
    """Audit sink writing one INFO record per action to the audit logger."""

    def __init__(self, logger_name: str = "quill.journal.audit") -> None:
        self._logger = logging.getLogger(logger_name)
        self.records: list[tuple[str, str | None, dict[str, Any]]] = []

    async def record(
        self, action: str, resource_id: str | None, details: dict[str, Any]
    ) -> None:
        self.records.append((action, resource_id, dict(details)))
        self._logger.info(
            "audit action=%s resource_id=%s details=%s", action, resource_id, details
        )


async def _deliver(
    sink: "AuditSink",
    action: str,
    resource_id: str | None,
    details: dict[str, Any],
) -> None:
    try:
        await sink.record(action, resource_id, details)
    except AuditSinkFailure:
        raise
    except Exception as e:
        raise AuditSinkFailure(
            f"Audit sink rejected {action} record: {type(e).__name__}"
        ) from e


async def record_audit(
    sink: "AuditSink | None",
    action: str,
    resource_id: str | None,
    details: dict[str, Any],
) -> bool:
    """Write an audit record without ever failing the caller.

    Sinks may raise AuditSinkFailure themselves; any other error they raise is
    wrapped in one. Either way the failure is logged and swallowed.

    Returns:
        True if the sink accepted the record, False otherwise.
    """
    if sink is None:
        return False
    try:
        await _deliver(sink, action, resource_id, details)
    except AuditSinkFailure as e:
        logger.error("%s", e)
        return False
    return True
