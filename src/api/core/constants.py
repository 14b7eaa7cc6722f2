API_VERSION_HEADER = "X-PharmaStock-Version"

# JWT Configuration
JWT_ALGORITHM = "HS256"
ANONYMOUS_JWT_ROLE = "anon"

# Authentication endpoints configuration
SKIP_AUTH_PATHS = {
    "/openapi.json",
    "/docs",
    "/redoc",
    "/health",
    "/health/liveness",
    "/",
}

# Realtime
NOTIFICATION_CHANNEL_PREFIX = "notifications"
WS_POLICY_VIOLATION = 1008

# Role change requests
ROLE_REQUEST_LIST_LIMIT = 200
ROLE_CHANGE_RESPONSE_DEDUPE_PREFIX = "role_change_response"

# Notifications
NOTIFICATION_LIST_LIMIT = 200
NOTIFICATION_TITLE_MAX_LENGTH = 200
NOTIFICATION_MESSAGE_MAX_LENGTH = 5000
