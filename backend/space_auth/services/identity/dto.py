"""
DTOs for IdentityService.

Data Transfer Objects (DTOs) isolate the service layer from ORM models,
ensuring clear input/output contracts and type safety.
"""

from __future__ import annotations

from dataclasses import dataclass

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserRegisterIn:
    """
    Input DTO for account creation.

    :param email: Login email (normalized to lowercase).
    :type email: str
    :param password: Raw password to be hashed by the model.
    :type password: str
    :param display_name: Optional public name; defaults to the email local part.
    :type display_name: str | None
    """

    email: str
    password: str
    display_name: str | None = None


# --------------------------------------------------------------------------- #
# Policy
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class PasswordPolicy:
    """
    Password rules applied on registration.

    :param min_length: Minimum number of characters.
    :param require_digit: At least one ``0-9`` character.
    :param require_lowercase: At least one ``a-z`` character.
    """

    min_length: int = 6
    require_digit: bool = True
    require_lowercase: bool = True

    def violations(self, password: str) -> list[str]:
        """Return one message per broken rule, empty when the password passes."""
        messages: list[str] = []
        if len(password) < self.min_length:
            messages.append(f"Passwords must be at least {self.min_length} characters.")
        if self.require_digit and not any(ch.isdigit() for ch in password):
            messages.append("Passwords must have at least one digit ('0'-'9').")
        if self.require_lowercase and not any("a" <= ch <= "z" for ch in password):
            messages.append("Passwords must have at least one lowercase ('a'-'z').")
        return messages
