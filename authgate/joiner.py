import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable

from authgate.config import DEFAULT_JOIN_DELAY
from authgate.discord_api import DiscordClient
from authgate.models import JoinOutcome

log = logging.getLogger(__name__)


class GuildJoiner:
    """Adds one user to each configured guild, in order, pausing between attempts."""

    def __init__(
        self,
        client: DiscordClient,
        bot_token: str,
        delay: float = DEFAULT_JOIN_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.bot_token = bot_token
        self.delay = delay
        self.sleep = sleep

    async def join_all(self, guild_ids: Iterable[str], user_id: str, access_token: str) -> list[JoinOutcome]:
        outcomes: list[JoinOutcome] = []
        for i, guild_id in enumerate(guild_ids):
            if i > 0:
                log.info("[join_all] waiting %ss before joining guild %s", self.delay, guild_id)
                await self.sleep(self.delay)

            log.info("[join_all] joining guild %s with user %s", guild_id, user_id)
            outcome = await self.client.join_guild(guild_id, user_id, access_token, self.bot_token)
            if not outcome.ok:
                log.error("[join_all] %s: %s", outcome.as_error(), outcome.detail)
            outcomes.append(outcome)

        joined = sum(1 for o in outcomes if o.ok)
        log.info("[join_all] %d/%d guilds joined for user %s", joined, len(outcomes), user_id)
        return outcomes
