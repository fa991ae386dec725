"""Log event types for structured logging."""

from enum import StrEnum


class LogEvent(StrEnum):
    """Log event types for harbourmaster.

    Used with logger.info/warning/error extra dict:
        logger.info("message", extra={"event": LogEvent.CONTAINER_STARTED, ...})
    """

    # Image events
    IMAGE_PULL_STARTED = "image_pull_started"
    IMAGE_PULL_PROGRESS = "image_pull_progress"
    IMAGE_PULLED = "image_pulled"

    # Container events
    CONTAINER_CREATED = "container_created"
    CONTAINER_STARTED = "container_started"
    CONTAINER_INSPECTED = "container_inspected"
    CONTAINER_REMOVED = "container_removed"

    # Network events
    NETWORK_CREATED = "network_created"
    NETWORK_REMOVED = "network_removed"

    # Error events
    STAGE_FAILED = "stage_failed"
