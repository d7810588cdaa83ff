import os
from dataclasses import dataclass, field
from os.path import join, dirname

from dotenv import load_dotenv

DEFAULT_REDIRECT_URI = "https://bot-testing.onrender.com/api/auth"
DEFAULT_API_BASE = "https://discord.com/api/v10"
DEFAULT_PORT = 2816
DEFAULT_JOIN_DELAY = 30.0

REQUIRED_KEYS = ("CLIENT_ID", "CLIENT_SECRET", "BOT_TOKEN")


def load_env(name: str | None = None) -> bool:
    """Load ``.env`` (or ``<name>.env``) from the project root into os.environ."""
    return load_dotenv(join(dirname(__file__), f"../{name or ''}.env"), verbose=True)


def parse_guild_ids(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(g.strip() for g in raw.split(",") if g.strip())


def _truthy(raw: str | None) -> bool:
    return (raw or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    # ===== OAuth =====
    client_id: str | None = None
    client_secret: str | None = None
    redirect_uri: str = DEFAULT_REDIRECT_URI
    request_email: bool = False

    # ===== Discord =====
    bot_token: str | None = None
    guild_ids: tuple[str, ...] = field(default_factory=tuple)
    join_delay: float = DEFAULT_JOIN_DELAY
    api_base: str = DEFAULT_API_BASE

    # ===== Store =====
    store_url: str | None = None

    # ===== Flask =====
    port: int = DEFAULT_PORT

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            client_id=env.get("CLIENT_ID"),
            client_secret=env.get("CLIENT_SECRET"),
            redirect_uri=env.get("REDIRECT_URI") or DEFAULT_REDIRECT_URI,
            request_email=_truthy(env.get("REQUEST_EMAIL")),
            bot_token=env.get("BOT_TOKEN"),
            guild_ids=parse_guild_ids(env.get("GUILD_IDS")),
            join_delay=float(env.get("JOIN_DELAY") or DEFAULT_JOIN_DELAY),
            api_base=(env.get("DISCORD_API_BASE") or DEFAULT_API_BASE).rstrip("/"),
            store_url=env.get("STORE_URL") or None,
            port=int(env.get("PORT") or DEFAULT_PORT),
        )

    def missing(self) -> list[str]:
        values = {
            "CLIENT_ID": self.client_id,
            "CLIENT_SECRET": self.client_secret,
            "BOT_TOKEN": self.bot_token,
        }
        return [key for key in REQUIRED_KEYS if not values[key]]
