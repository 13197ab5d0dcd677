import time
import uuid

SESSION_PREFIX = "session"


def generate_session_id() -> str:
    """Build a fresh session identifier for a chat widget client.

    The value is ``session_<epoch millis>_<9 hex chars>``.  It is an advisory
    correlation token that groups a sequence of chat interactions; collisions
    are unlikely but not impossible and are never treated as fatal.
    """
    millis = int(time.time() * 1000)
    suffix = uuid.uuid4().hex[:9]
    return f"{SESSION_PREFIX}_{millis}_{suffix}"
