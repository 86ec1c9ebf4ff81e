"""Internal constants shared across the library."""

DEFAULT_URL = "ws://localhost:5000"

# RFC 6455 close codes.
CLOSE_NORMAL = 1000
CLOSE_ABNORMAL = 1006
CLIENT_DISCONNECT_REASON = "Client disconnect"

DEFAULT_RECONNECT_DELAY = 1.0
DEFAULT_MAX_RECONNECT_ATTEMPTS = 5
DEFAULT_HEARTBEAT = 30.0
DEFAULT_CONNECT_TIMEOUT = 10.0

# Outbound control messages understood by the POS server.
CONTROL_PING = "ping"
CONTROL_SUBSCRIBE = "subscribe"
CONTROL_UNSUBSCRIBE = "unsubscribe"

# Server notices that share a name with local lifecycle topics.
SERVER_WELCOME = "connected"
SERVER_ERROR = "error"

# ------------------------------------------------------------------
# Computation limits
# ------------------------------------------------------------------

MAX_DATE_RANGE_DAYS = 365
TOP_EXPENSE_CATEGORIES = 5

# Completed-order ids remembered for de-duplication.
COMPLETED_ORDER_HISTORY = 10_000
