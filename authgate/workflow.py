"""OAuth callback workflow.

Runs one callback strictly in order::

    AWAITING_CODE -> EXCHANGING -> FETCHING_PROFILE -> PERSISTING -> JOINING -> RENDERING

Exchange and profile failures end the run in FAILED with a generic 500.
Store and join failures are logged and never change the result. Anything
else is caught here and also ends in a generic 500.
"""

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

import aiohttp

from authgate.config import Settings
from authgate.discord_api import DiscordClient
from authgate.errors import MissingInputError, UnhandledWorkflowError, UpstreamError
from authgate.joiner import GuildJoiner
from authgate.models import JoinOutcome, SinkResult, UserProfile
from authgate.sink import ProfileSink

log = logging.getLogger(__name__)

GENERIC_FAILURE = "Something went wrong"


class WorkflowState(enum.Enum):
    AWAITING_CODE = "awaiting_code"
    EXCHANGING = "exchanging"
    FETCHING_PROFILE = "fetching_profile"
    PERSISTING = "persisting"
    JOINING = "joining"
    RENDERING = "rendering"
    FAILED = "failed"


@dataclass(frozen=True)
class WorkflowResult:
    state: WorkflowState
    status: int
    message: str = ""
    profile: UserProfile | None = None
    joins: tuple[JoinOutcome, ...] = ()
    sink: SinkResult | None = None
    community_count: int = 0
    error: Exception | None = field(default=None, repr=False)
    trail: tuple[WorkflowState, ...] = ()

    @property
    def ok(self) -> bool:
        return self.state is WorkflowState.RENDERING


class CallbackWorkflow:
    def __init__(
        self,
        settings: Settings,
        session_factory: Callable[[], aiohttp.ClientSession] = aiohttp.ClientSession,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = settings
        self.session_factory = session_factory
        self.sleep = sleep

    async def run(self, code: str | None) -> WorkflowResult:
        trail = [WorkflowState.AWAITING_CODE]
        try:
            if not code:
                raise MissingInputError()
            return await self._run(code, trail)
        except MissingInputError as e:
            log.info("[callback] rejected: %s", e)
            return self._failed(trail, 400, str(e), e)
        except UpstreamError as e:
            log.error("[callback] %s failed: status=%s body=%s", e.stage, e.status, e.body)
            return self._failed(trail, 500, GENERIC_FAILURE, e)
        except Exception as e:
            log.exception("[callback] unhandled error in state %s", trail[-1].value)
            wrapped = UnhandledWorkflowError(f"{type(e).__name__} in {trail[-1].value}")
            wrapped.__cause__ = e
            return self._failed(trail, 500, GENERIC_FAILURE, wrapped)

    async def _run(self, code: str, trail: list[WorkflowState]) -> WorkflowResult:
        settings = self.settings
        async with self.session_factory() as session:
            client = DiscordClient(session, settings.api_base)

            trail.append(WorkflowState.EXCHANGING)
            tokens = await client.exchange_code(
                code, settings.client_id, settings.client_secret, settings.redirect_uri
            )

            trail.append(WorkflowState.FETCHING_PROFILE)
            profile = await client.fetch_profile(tokens.access_token)

            trail.append(WorkflowState.PERSISTING)
            sink_result = await ProfileSink(session, settings.store_url).store(profile)
            if not sink_result.ok:
                log.warning("[callback] profile not stored for %s: %s", profile.id, sink_result.error)

            trail.append(WorkflowState.JOINING)
            joiner = GuildJoiner(client, settings.bot_token, settings.join_delay, self.sleep)
            joins = await joiner.join_all(settings.guild_ids, profile.id, tokens.access_token)

        trail.append(WorkflowState.RENDERING)
        return WorkflowResult(
            state=WorkflowState.RENDERING,
            status=200,
            profile=profile,
            joins=tuple(joins),
            sink=sink_result,
            community_count=len(settings.guild_ids),
            trail=tuple(trail),
        )

    @staticmethod
    def _failed(trail, status, message, error) -> WorkflowResult:
        trail.append(WorkflowState.FAILED)
        return WorkflowResult(
            state=WorkflowState.FAILED,
            status=status,
            message=message,
            error=error,
            trail=tuple(trail),
        )
