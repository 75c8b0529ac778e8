"""Application constants such as user roles."""
from enum import Enum


class MusicRoles(str, Enum):
    ADMIN = "Admin"
    MUSIC_USER = "MusicUser"

    @classmethod
    def all(cls) -> list[str]:
        return [role.value for role in cls]


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"
