from enum import Enum


class PrivateMode(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"


class ShuffleMode(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"


class Registration(str, Enum):
    """Итог сценариев /start и /revoke. Хранится рядом с режимами, а не в состоянии."""
    UNREGISTERED = "unregistered"
    REGISTERED = "registered"
    REVOKED = "revoked"
