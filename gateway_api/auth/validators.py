from __future__ import annotations

import re
from typing import Optional

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]{3,}$")
# At least one digit, one of !@#$%^&*, one lowercase, one uppercase; 6+ chars.
PASSWORD_PATTERN = re.compile(r"^(?=.*\d)(?=.*[!@#$%^&*])(?=.*[a-z])(?=.*[A-Z]).{6,}$")

INVALID_USERNAME_MESSAGE = (
    "Username must be at least 3 characters long and contain only alphanumeric "
    "characters and underscores"
)
INVALID_PASSWORD_MESSAGE = (
    "Password must be at least 6 characters long and contain at least one uppercase "
    "letter, one lowercase letter, one number, and one special character"
)


def validate_username(username: Optional[str]) -> bool:
    return isinstance(username, str) and USERNAME_PATTERN.fullmatch(username) is not None


def validate_password(password: Optional[str]) -> bool:
    return isinstance(password, str) and PASSWORD_PATTERN.fullmatch(password) is not None
