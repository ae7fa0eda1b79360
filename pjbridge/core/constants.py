"""
Protocol constants and connection defaults.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

# Connection defaults
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 4444
DEFAULT_WIRE_ENCODING = "ascii"
DEFAULT_LOCAL_ENCODING = "ascii"

# Upper bound for one reply line; a longer line is a protocol error
DEFAULT_MAX_LINE_LENGTH = 16 * 1024 * 1024

# Framing
TOKEN_SEPARATOR = b" "
LINE_TERMINATOR = b"\n"

# Reply status marker for success
STATUS_OK = "ok"

# Operation names
OP_CONNECT = "connect"
OP_EXEC = "exec"
OP_FETCH_ARRAY = "fetch_array"
OP_FREE_RESULT = "free_result"

# Each row line of a fetch_array reply carries (column name, column value)
ROW_LINE_TOKENS = 2

# Logging defaults
DEFAULT_LOG_MAX_BYTES = 10485760  # 10 MB
DEFAULT_LOG_BACKUP_COUNT = 5
