"""
models/user.py – Registered identity record.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """
    A registered user's durable credential record.

    Attributes
    ----------
    email        : Unique key.
    display_name : Name shown in the profile header.
    token        : Opaque credential token derived from the password.
    """

    email: str
    display_name: str
    token: str

    def __str__(self) -> str:
        return f"{self.display_name} <{self.email}>"
