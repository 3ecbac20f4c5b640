"""Immutable value objects for the Identity bounded context."""
from dataclasses import dataclass
import re

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")
CURP_PATTERN = re.compile(r"^[A-Z0-9]{18}$")


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value))


def is_valid_curp(value: str) -> bool:
    return bool(CURP_PATTERN.match(value.upper()))


@dataclass(frozen=True)
class Email:
    value: str

    def __post_init__(self) -> None:
        if not is_valid_email(self.value):
            raise ValueError(f"Invalid email address: {self.value}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PasswordHash:
    """Opaque wrapper for the hashed password string, never the raw password."""
    value: str

    def __str__(self) -> str:
        return self.value
