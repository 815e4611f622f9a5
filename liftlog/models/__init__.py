"""ORM models - import all so Base.metadata is complete for migrations."""

from liftlog.models.session_record import ActiveSessionRecord, HistoryRecord

__all__ = ["ActiveSessionRecord", "HistoryRecord"]
