"""Session-related data models."""

from dataclasses import dataclass
from enum import Enum


class AccountType(str, Enum):
    """Which side of the app the user is acting as."""

    CLIENT = "client"
    VENDOR = "vendor"


@dataclass
class User:
    """A NightVibe user (session owner or chat participant)."""

    id: str
    username: str
    email: str = ""
    account_type: AccountType = AccountType.CLIENT
    profile_picture: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "accountType": self.account_type.value,
            "profilePicture": self.profile_picture,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        return cls(
            id=data["id"],
            username=data.get("username", ""),
            email=data.get("email", ""),
            account_type=AccountType(data.get("accountType", AccountType.CLIENT.value)),
            profile_picture=data.get("profilePicture"),
        )


@dataclass
class Session:
    """Authenticated session: token plus cached user profile."""

    auth_token: str
    user: User
