"""Preferred key ordering for structured log events."""

DEFAULT_EVENT_KEY_ORDER = ("ts_utc", "level", "logger", "message")

EVENT_KEY_ORDER: dict[str, tuple[str, ...]] = {
    "app_start": ("ts_utc", "level", "config_file", "log_file", "base_url", "timeout"),
    "app_stop": ("ts_utc", "level", "reason", "uptime_ms", "error_type", "error"),
    "api_request": (
        "ts_utc",
        "level",
        "http_method",
        "path",
        "http_status",
        "elapsed_ms",
    ),
    "api_error": ("ts_utc", "level", "http_method", "path", "error_type", "error"),
    "session_created": ("ts_utc", "level", "session_id", "elapsed_ms"),
    "session_cleared": ("ts_utc", "level", "session_id", "message_count"),
    "stream_open": ("ts_utc", "level", "session_id", "http_status"),
    "stream_ready": ("ts_utc", "level", "session_id"),
    "stream_closed": ("ts_utc", "level", "session_id", "reason", "error_type", "error"),
    "stream_reconnect": (
        "ts_utc",
        "level",
        "component",
        "operation",
        "attempt",
        "sleep_sec",
        "error_type",
        "error",
    ),
    "stream_frame_invalid": ("ts_utc", "level", "session_id", "error", "raw"),
    "event_dropped": ("ts_utc", "level", "reason", "raw"),
    "event_applied": ("ts_utc", "level", "event_type", "kind", "message_count"),
    "reducer_error": ("ts_utc", "level", "event_type", "error_type", "error"),
    "decision_rejected": ("ts_utc", "level", "decision_id", "option_id", "reason"),
    "decision_resolved": ("ts_utc", "level", "decision_id", "option_id", "message_id"),
    "decision_message_missing": ("ts_utc", "level", "decision_id", "option_id"),
    "session_start": ("ts_utc", "level", "base_url", "log_file", "timeout"),
    "session_stop": ("ts_utc", "level", "reason", "session_id", "message_count"),
    "command_exec": ("ts_utc", "level", "command", "args_summary", "elapsed_ms"),
    "command_error": ("ts_utc", "level", "command", "args_summary", "error_type", "error"),
}

LOG_PATH_FIELDS = frozenset({"config_file", "log_file", "logs_dir"})
