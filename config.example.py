# config.example.py

"""
Documentation-only module (safe to commit).

Configuration is loaded from environment variables (optionally via a local .env file).
Command line flags of `pollwatch` override the polling and HTTP values.
"""

ENV_VARS = {
    # Logging
    "POLLWATCH_LOG_LEVEL": "Console logging level (default: INFO).",
    "POLLWATCH_LOG_DIR": "Directory for pollwatch.log (default: unset, console only).",
    # Polling
    "POLLWATCH_DELAY_SECONDS": "Seconds between the end of one attempt and the next (default: 3).",
    "POLLWATCH_TIMEOUT_SECONDS": "Overall time limit of a polling run in seconds (default: 30).",
    # HTTP status check
    "POLLWATCH_HTTP_TIMEOUT_SECONDS": "Per-request timeout in seconds (default: 5).",
    "POLLWATCH_EXPECT_STATUS": "Comma/space separated accepted status codes (default: 200).",
}
