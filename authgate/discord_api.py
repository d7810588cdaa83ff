import json
import logging
import secrets
from urllib.parse import urlencode

import aiohttp
import discord

from authgate.config import DEFAULT_API_BASE
from authgate.errors import UpstreamAuthError, UpstreamProfileError
from authgate.models import JoinOutcome, TokenSet, UserProfile

log = logging.getLogger(__name__)

AUTHORIZE_URL = "https://discord.com/oauth2/authorize"
INVITE_PERMISSIONS = discord.Permissions(administrator=True)
INVITE_SCOPES = ("bot", "applications.commands")


def _ok(status: int) -> bool:
    return 200 <= status < 300


def _preview(raw: bytes) -> str:
    # for logs only; the JSON parse below decodes strictly
    return raw.decode("utf-8", errors="replace")


# ---------------- Links ----------------
def new_state() -> str:
    return secrets.token_urlsafe(12)


def authorize_url(client_id: str | None, redirect_uri: str, state: str, request_email: bool = False) -> str:
    scopes = ["identify", "guilds.join"]
    if request_email:
        scopes.insert(1, "email")
    params = urlencode(
        {
            "client_id": client_id or "",
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": " ".join(scopes),
            "state": state,
        }
    )
    return f"{AUTHORIZE_URL}?{params}"


def invite_url(client_id: str | None) -> str:
    url = discord.utils.oauth_url(client_id or "", permissions=INVITE_PERMISSIONS, scopes=INVITE_SCOPES)
    # oauth_url only adds response_type alongside a redirect_uri
    return f"{url}&response_type=code"


# ---------------- REST client ----------------
class DiscordClient:
    """The three Discord REST calls the callback needs, over one aiohttp session."""

    def __init__(self, session: aiohttp.ClientSession, api_base: str = DEFAULT_API_BASE):
        self.session = session
        self.api_base = api_base.rstrip("/")

    async def exchange_code(self, code: str, client_id: str, client_secret: str, redirect_uri: str) -> TokenSet:
        try:
            async with self.session.post(
                f"{self.api_base}/oauth2/token",
                data={
                    "client_id": client_id,
                    "client_secret": client_secret,
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": redirect_uri,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            ) as resp:
                status = resp.status
                raw = await resp.read()
        except aiohttp.ClientError as e:
            raise UpstreamAuthError(None, str(e)) from e

        body = _preview(raw)
        if not _ok(status):
            raise UpstreamAuthError(status, body)
        try:
            tokens = TokenSet.from_payload(json.loads(raw.decode("utf-8")))
        except (ValueError, KeyError, TypeError) as e:
            raise UpstreamAuthError(status, body, "token response malformed") from e

        log.info("[exchange_code] access_token acquired (scope=%s)", tokens.scope)
        return tokens

    async def fetch_profile(self, access_token: str) -> UserProfile:
        try:
            async with self.session.get(
                f"{self.api_base}/users/@me",
                headers={"Authorization": f"Bearer {access_token}"},
            ) as resp:
                status = resp.status
                raw = await resp.read()
        except aiohttp.ClientError as e:
            raise UpstreamProfileError(None, str(e)) from e

        body = _preview(raw)
        if not _ok(status):
            raise UpstreamProfileError(status, body)
        try:
            profile = UserProfile.from_payload(json.loads(raw.decode("utf-8")))
        except (ValueError, KeyError, TypeError) as e:
            raise UpstreamProfileError(status, body, "profile response malformed") from e

        log.info("[fetch_profile] user %s (%s)", profile.username, profile.id)
        return profile

    async def join_guild(self, guild_id: str, user_id: str, user_access_token: str, bot_token: str) -> JoinOutcome:
        # Never raises: the join loop must keep going whatever happens here
        try:
            async with self.session.put(
                f"{self.api_base}/guilds/{guild_id}/members/{user_id}",
                json={"access_token": user_access_token},
                headers={"Authorization": f"Bot {bot_token}"},
            ) as resp:
                status = resp.status
                body = _preview(await resp.read())
        except Exception as e:
            log.warning("[join_guild] guild %s error: %r", guild_id, e)
            return JoinOutcome.failed(guild_id, repr(e))

        if not _ok(status):
            log.warning("[join_guild] guild %s refused: status=%s body=%s", guild_id, status, body)
            return JoinOutcome.failed(guild_id, body or f"status {status}", status=status)

        log.info("[join_guild] joined guild %s: %s", guild_id, status)
        return JoinOutcome.succeeded(guild_id, status)
