import re
import secrets
from collections.abc import Callable
from datetime import UTC, datetime

INVITATION_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")
NAME_MAX_LENGTH = 60

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def new_id() -> str:
    """32 lowercase hex characters."""
    return secrets.token_hex(16)


def is_valid_invitation_id(value: str | None) -> bool:
    return bool(value) and INVITATION_ID_PATTERN.match(value) is not None


def normalize_name(name: str | None) -> str:
    """Trim and collapse internal whitespace."""
    return " ".join(str(name or "").split())
