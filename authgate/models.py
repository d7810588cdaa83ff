from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import discord

from authgate.errors import JoinAttemptError


# ---------------- OAuth ----------------
@dataclass(frozen=True)
class TokenSet:
    access_token: str
    token_type: str = "Bearer"
    expires_in: int | None = None
    refresh_token: str | None = None
    scope: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "TokenSet":
        access_token = payload["access_token"]
        if not isinstance(access_token, str) or not access_token:
            raise ValueError("access_token missing from token response")
        return cls(
            access_token=access_token,
            token_type=payload.get("token_type", "Bearer"),
            expires_in=payload.get("expires_in"),
            refresh_token=payload.get("refresh_token"),
            scope=payload.get("scope"),
            raw=payload,
        )


@dataclass(frozen=True)
class UserProfile:
    id: str
    username: str
    global_name: str | None = None
    email: str | None = None
    avatar: str | None = None
    banner: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "UserProfile":
        user_id = payload["id"]
        # bool is an int subclass
        if isinstance(user_id, bool) or not isinstance(user_id, (str, int)) or user_id == "":
            raise ValueError(f"bad user id in profile response: {user_id!r}")
        username = payload["username"]
        if not isinstance(username, str) or not username:
            raise ValueError("username missing from profile response")
        return cls(
            id=str(user_id),
            username=username,
            global_name=payload.get("global_name"),
            email=payload.get("email"),
            avatar=payload.get("avatar"),
            banner=payload.get("banner"),
            raw=payload,
        )


@dataclass(frozen=True)
class ProfileSnapshot:
    id: str
    username: str
    email: str | None
    avatar: str | None
    banner: str | None
    captured_at: datetime

    @classmethod
    def capture(cls, profile: UserProfile, now: datetime | None = None) -> "ProfileSnapshot":
        return cls(
            id=profile.id,
            username=profile.username,
            email=profile.email,
            avatar=profile.avatar,
            banner=profile.banner,
            captured_at=now or discord.utils.utcnow(),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "avatar": self.avatar,
            "banner": self.banner,
            "captured_at": self.captured_at.isoformat(),
        }


# ---------------- Results ----------------
@dataclass(frozen=True)
class JoinOutcome:
    guild_id: str
    ok: bool
    status: int | None = None
    detail: str | None = None

    @classmethod
    def succeeded(cls, guild_id: str, status: int) -> "JoinOutcome":
        return cls(guild_id=guild_id, ok=True, status=status)

    @classmethod
    def failed(cls, guild_id: str, detail: str, status: int | None = None) -> "JoinOutcome":
        return cls(guild_id=guild_id, ok=False, status=status, detail=detail)

    @property
    def already_member(self) -> bool:
        # Discord answers 204 instead of 201 when the user is already in the guild
        return self.ok and self.status == 204

    def as_error(self) -> JoinAttemptError | None:
        if self.ok:
            return None
        return JoinAttemptError(self.guild_id, self.status, self.detail)


@dataclass(frozen=True)
class SinkResult:
    """Result of a best-effort store write. Callers log ``error`` and move on."""

    ok: bool
    status: int | None = None
    error: Exception | None = None
    attempted: bool = True

    @classmethod
    def stored(cls, status: int) -> "SinkResult":
        return cls(ok=True, status=status)

    @classmethod
    def skipped(cls) -> "SinkResult":
        return cls(ok=True, attempted=False)

    @classmethod
    def failed(cls, error: Exception, status: int | None = None) -> "SinkResult":
        return cls(ok=False, status=status, error=error)
