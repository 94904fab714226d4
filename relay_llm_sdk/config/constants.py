"""
Shared constants for the relay SDK.

Advisory templates are formatted by the core and handed to an
AdvisoryNotifier; rendering them is up to the host application.
"""

# Transport timeouts (seconds)
DEFAULT_CONNECT_TIMEOUT = 30.0
DEFAULT_READ_TIMEOUT = 60.0
POLL_INTERVAL_SECONDS = 0.1

# Environment variables overriding the transport timeouts
CONNECT_TIMEOUT_ENV_VAR = "RELAY_CONNECT_TIMEOUT"
READ_TIMEOUT_ENV_VAR = "RELAY_READ_TIMEOUT"

# Upper bound for one attempt (initial call or retry) in the failover orchestrator
OVERALL_TIMEOUT_SECONDS = 180.0

# Classifier fallback messages
QUOTA_EXCEEDED_MESSAGE = "Quota exceeded"
MODEL_OVERLOADED_MESSAGE = "Model overloaded"
MAX_TOKENS_MESSAGE = "Quota exceeded (MAX_TOKENS)"

# Advisory templates
QUOTA_REACHED_ADVISORY = "Quota reached"
API_ERROR_ADVISORY = "API error"
TRYING_NEXT_ADVISORY = "Trying next API: {model}"
QUOTA_EXCEEDED_WARNING = (
    "Quota exceeded for the configured providers. "
    "Add another API configuration or wait before trying again."
)
GENERATION_FAILED_WARNING = "Generation failed: {error}"

# Sentinel terminating Server-Sent-Events streams
SSE_DONE_SENTINEL = "[DONE]"

# Player2 identifies the calling application by a client id header
PLAYER2_CLIENT_ID_ENV_VAR = "RELAY_PLAYER2_CLIENT_ID"
DEFAULT_PLAYER2_CLIENT_ID = "relay-llm-sdk"
