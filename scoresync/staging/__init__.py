from .audit import AuditLog, LoggerErrorLog, ensure_sync_log_table, write_sync_log_record

__all__ = [
	"AuditLog",
	"LoggerErrorLog",
	"ensure_sync_log_table",
	"write_sync_log_record",
]
