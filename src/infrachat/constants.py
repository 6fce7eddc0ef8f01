"""Application-level constants for infrachat.

This module keeps cross-cutting identity, path and transcript text constants.
"""

# ============================================================================
# Application identity
# ============================================================================

APP_NAME = "infrachat"

# ============================================================================
# Files and directories
# ============================================================================

LOG_FILE_EXTENSION = ".log"

USER_DATA_DIR = f"~/.{APP_NAME}"
DEFAULT_LOGS_DIR = f"{USER_DATA_DIR}/logs"

DATETIME_FORMAT_FILENAME = "%Y-%m-%d_%H-%M-%S"

# ============================================================================
# Backend
# ============================================================================

DEFAULT_BASE_URL = "http://localhost:8080"
BASE_URL_ENV_VAR = "INFRACHAT_BASE_URL"

# Decision ids are UUIDs; anything shorter is rejected before use.
MIN_DECISION_ID_LENGTH = 30

# ============================================================================
# Decision options understood locally
# ============================================================================

OPTION_RUN = "run"
OPTION_CANCEL = "cancel"

# ============================================================================
# Transcript texts
# ============================================================================

TEXT_EDIT_PARAMETERS = "✏️ Edit Parameters"
TEXT_PARSING_INTENT = "🔄 Parsing intent..."
TEXT_OPERATION_CANCELLED = "🛑 Operation cancelled. No infra command was run."

ERROR_DECISION_ID_MISSING = "❌ Error: Could not extract decision ID from event."
ERROR_DECISION_ID_FORMAT = "❌ Error: Invalid decision ID format."
ERROR_INVALID_DECISION_ID = "❌ Error: Invalid decision ID."
ERROR_INVALID_OPTION_ID = "❌ Error: Invalid option ID."
ERROR_DECISION_ID_TOO_SHORT = "❌ Error: Decision ID format invalid."
ERROR_RESOLVE_FAILED = "❌ Failed to process decision. Please try again."
ERROR_SEND_FAILED = "❌ Failed to send message. Please try again."
ERROR_PARAM_UPDATE_FAILED = "❌ Failed to update parameters. Please try again."
ERROR_SESSION_FAILED = "❌ Failed to create session. Please try again."
