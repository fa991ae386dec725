"""Error handling module for harbourmaster.

One exception class per orchestration stage. Every failure is surfaced to
the caller with the underlying Engine error chained as __cause__; nothing
is retried or recovered locally.

Usage:
    from harbourmaster.errors import CreateFailedError, StartFailedError

    try:
        container = await ContainerBuilder("alpine").build()
    except StartFailedError as exc:
        # The container exists but never started; it is not removed for you.
        await remove_container(client, exc.resource_id)
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes, one per stage."""

    PULL_FAILED = "PULL_FAILED"
    CREATE_FAILED = "CREATE_FAILED"
    START_FAILED = "START_FAILED"
    INSPECT_FAILED = "INSPECT_FAILED"
    DELETE_FAILED = "DELETE_FAILED"


class HarbourmasterError(Exception):
    """Base exception for harbourmaster.

    Attributes:
        code: The error code from ErrorCode enum.
        message: Human-readable error message.
        resource_id: Engine identifier of the resource left behind, if any.
    """

    def __init__(
        self, code: ErrorCode, message: str, resource_id: str | None = None
    ) -> None:
        self.code = code
        self.message = message
        self.resource_id = resource_id
        super().__init__(message)


class PullFailedError(HarbourmasterError):
    """Image pull stream reported an error or the image is unreachable."""

    def __init__(self, message: str = "Image pull failed") -> None:
        super().__init__(ErrorCode.PULL_FAILED, message)


class CreateFailedError(HarbourmasterError):
    """Engine rejected resource creation. Nothing was created."""

    def __init__(self, message: str = "Resource creation failed") -> None:
        super().__init__(ErrorCode.CREATE_FAILED, message)


class StartFailedError(HarbourmasterError):
    """Container was created but could not be started. It is left in place."""

    def __init__(self, resource_id: str, message: str = "Container start failed") -> None:
        super().__init__(ErrorCode.START_FAILED, message, resource_id)


class InspectFailedError(HarbourmasterError):
    """Container is running but its state could not be retrieved."""

    def __init__(
        self, resource_id: str, message: str = "Container inspect failed"
    ) -> None:
        super().__init__(ErrorCode.INSPECT_FAILED, message, resource_id)


class DeleteFailedError(HarbourmasterError):
    """Forced removal was rejected or the resource was already absent."""

    def __init__(
        self, resource_id: str | None = None, message: str = "Resource removal failed"
    ) -> None:
        super().__init__(ErrorCode.DELETE_FAILED, message, resource_id)
