class AuthGateError(Exception):
    """Base class for everything the callback workflow raises."""


class MissingInputError(AuthGateError):
    def __init__(self, message: str = "No code provided"):
        super().__init__(message)


class UpstreamError(AuthGateError):
    """Discord answered with a non-success status or a body we could not use.

    ``status`` is ``None`` when the request never got a response.
    """

    stage = "upstream"

    def __init__(self, status: int | None, body: str | None = None, message: str | None = None):
        self.status = status
        self.body = body
        super().__init__(message or f"{self.stage} failed: status={status}")


class UpstreamAuthError(UpstreamError):
    stage = "exchange_code"


class UpstreamProfileError(UpstreamError):
    stage = "fetch_profile"


class SinkWriteError(AuthGateError):
    def __init__(self, status: int | None, body: str | None = None):
        self.status = status
        self.body = body
        super().__init__(f"store write failed: status={status}")


class JoinAttemptError(AuthGateError):
    def __init__(self, guild_id: str, status: int | None, body: str | None = None):
        self.guild_id = guild_id
        self.status = status
        self.body = body
        super().__init__(f"join {guild_id} failed: status={status}")


class UnhandledWorkflowError(AuthGateError):
    pass
