"""Constants used throughout the notification hub."""

# HTTP Headers
REQUEST_ID_HEADER = "X-Request-ID"
IDEMPOTENCY_KEY_HEADER = "Idempotency-Key"

# OAuth2 scopes
USER_SCOPE = "notification:user"
ADMIN_SCOPE = "notification:admin"

# Cache key prefix for replayed mutation results
IDEMPOTENCY_CACHE_PREFIX = "notification:idempotency:"

# Seconds a client should wait before retrying after a transient store error
TRANSIENT_RETRY_AFTER_SECONDS = 1
