import logging

import aiohttp

from authgate.errors import SinkWriteError
from authgate.models import ProfileSnapshot, SinkResult, UserProfile

log = logging.getLogger(__name__)


class ProfileSink:
    """Best-effort write of a profile snapshot to the external store.

    ``store`` never raises; failures come back as ``SinkResult.failed``.
    """

    def __init__(self, session: aiohttp.ClientSession, store_url: str | None):
        self.session = session
        self.store_url = store_url

    async def store(self, profile: UserProfile) -> SinkResult:
        if not self.store_url:
            return SinkResult.skipped()

        snapshot = ProfileSnapshot.capture(profile)
        status = None
        try:
            async with self.session.post(self.store_url, json=snapshot.to_payload()) as resp:
                status = resp.status
                if not 200 <= status < 300:
                    raise SinkWriteError(status, await resp.text())
        except SinkWriteError as e:
            log.warning("[store] write for %s rejected: status=%s body=%s", profile.id, e.status, e.body)
            return SinkResult.failed(e, status=e.status)
        except Exception as e:
            log.warning("[store] write for %s failed: %r", profile.id, e)
            return SinkResult.failed(SinkWriteError(status, repr(e)), status=status)

        log.info("[store] saved %s", profile.id)
        return SinkResult.stored(status)
