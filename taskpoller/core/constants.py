"""Fixed runner constants.

The update retry policy is deliberately not configurable:

    MAX_UPDATE_RETRIES - Delivery attempts per task result (3)
    RETRY_BACKOFF_MS - Linear backoff step; attempt n waits n * 10 ms
"""

# =============================================================================
# Result delivery
# =============================================================================

MAX_UPDATE_RETRIES: int = 3

RETRY_BACKOFF_MS: int = 10

# =============================================================================
# Polling
# =============================================================================

# Seconds between poll iterations when no interval is configured
DEFAULT_POLL_INTERVAL: float = 1.0

DEFAULT_CONCURRENCY: int = 1

DEFAULT_SERVER_URL: str = "http://localhost:8080/api"

DEFAULT_REQUEST_TIMEOUT: float = 30.0

# =============================================================================
# Failure reporting
# =============================================================================

# Reason sent with a FAILED result when the worker error carries no message
DEFAULT_ERROR_MESSAGE: str = "An unknown error occurred"


def retry_delay_seconds(attempt: int) -> float:
    """Backoff before the next delivery attempt, after `attempt` failures."""
    return attempt * RETRY_BACKOFF_MS / 1000
