"""Operation log writer.

The operations log is advisory: a failed append is reported on the module
logger and dropped, never retried and never returned to the caller of the
mutation that triggered it.
"""
from __future__ import annotations

import logging

from ..core.exceptions import AuditLogError, DomainError
from .model import OperationLogEntry
from .repository import RecordRepository

logger = logging.getLogger(__name__)


class AuditLogWriter:
    def __init__(self, records: RecordRepository, log_collection: str, *, actor_column: str = "actor_id"):
        self._records = records
        self._log_collection = log_collection
        self._actor_column = actor_column

    @property
    def log_collection(self) -> str:
        return self._log_collection

    def append(self, entry: OperationLogEntry) -> dict:
        """Write one entry; raises ``AuditLogError`` on failure."""
        try:
            return self._records.insert(self._log_collection, entry.to_row(actor_column=self._actor_column))
        except DomainError as exc:
            raise AuditLogError(f"{self._log_collection}: {exc}") from exc

    def append_best_effort(self, entry: OperationLogEntry) -> None:
        try:
            self.append(entry)
        except AuditLogError:
            logger.error(
                "Audit log write dropped: %s %s #%s",
                entry.operation.value,
                entry.table_name,
                entry.record_id,
                exc_info=True,
            )
        else:
            logger.info(
                "Audit: %s - %s - %s #%s",
                entry.actor_id,
                entry.operation.value,
                entry.table_name,
                entry.record_id,
            )
