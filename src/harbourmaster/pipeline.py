"""Orchestration stages for building Docker resources.

A container build runs pull (optional) -> create -> start -> inspect,
strictly in that order. Each stage translates Engine failures into the
matching HarbourmasterError and aborts the build. No stage retries, and no
stage cleans up after an earlier one: a failure after create leaves the
container behind, identified by the error's resource_id.

Cancellation is not handled here. A task cancelled mid-build may leave a
created or running container that no handle refers to.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

import httpx

from harbourmaster.errors import (
    CreateFailedError,
    DeleteFailedError,
    InspectFailedError,
    PullFailedError,
    StartFailedError,
)
from harbourmaster.infra.docker import DockerResponseError
from harbourmaster.logging_schema import LogEvent

if TYPE_CHECKING:
    from harbourmaster.infra.docker import ContainerConfig, DockerClient, NetworkConfig

logger = logging.getLogger(__name__)

PullProgressCallback = Callable[[dict], None]


def _describe(exc: Exception) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            body = None
        message = body.get("message") if isinstance(body, dict) else None
        return f"{exc.response.status_code}: {message or exc.response.text}"
    return str(exc) or type(exc).__name__


def _stage_failed(stage: str, exc: Exception, **context: object) -> None:
    logger.error(
        "Stage %s failed: %s",
        stage,
        _describe(exc),
        extra={"event": LogEvent.STAGE_FAILED, "stage": stage, **context},
    )


# =============================================================================
# Container stages
# =============================================================================


async def pull_image(
    client: DockerClient,
    image: str,
    on_progress: PullProgressCallback | None = None,
) -> None:
    """Pull `image` and drain the progress stream to the end."""
    logger.info(
        "Pulling image: %s", image, extra={"event": LogEvent.IMAGE_PULL_STARTED, "image": image}
    )
    try:
        async for chunk in client.images.pull(image):
            logger.debug(
                "%s",
                chunk.get("status", chunk),
                extra={"event": LogEvent.IMAGE_PULL_PROGRESS, "image": image},
            )
            if on_progress is not None:
                on_progress(chunk)
    except (httpx.HTTPError, DockerResponseError) as exc:
        _stage_failed("pull", exc, image=image)
        raise PullFailedError(f"Failed to pull {image}: {_describe(exc)}") from exc
    logger.info(
        "Pulled image: %s", image, extra={"event": LogEvent.IMAGE_PULLED, "image": image}
    )


async def create_container(client: DockerClient, config: ContainerConfig) -> str:
    """Create the container described by `config` and return its id."""
    try:
        container_id = await client.containers.create(config)
    except (httpx.HTTPError, DockerResponseError) as exc:
        _stage_failed("create", exc, image=config.image, container=config.name)
        raise CreateFailedError(
            f"Failed to create container from {config.image}: {_describe(exc)}"
        ) from exc
    logger.info(
        "Created container",
        extra={
            "event": LogEvent.CONTAINER_CREATED,
            "container": config.name,
            "container_id": container_id,
            "image": config.image,
        },
    )
    return container_id


async def start_container(client: DockerClient, container_id: str) -> None:
    """Start a created container. The container is left in place on failure."""
    try:
        await client.containers.start(container_id)
    except httpx.HTTPError as exc:
        _stage_failed("start", exc, container_id=container_id)
        raise StartFailedError(
            container_id, f"Failed to start container {container_id}: {_describe(exc)}"
        ) from exc
    logger.info(
        "Started container",
        extra={"event": LogEvent.CONTAINER_STARTED, "container_id": container_id},
    )


async def inspect_container(client: DockerClient, container_id: str) -> dict:
    """Fetch the full state of a container."""
    try:
        details = await client.containers.inspect(container_id)
    except (httpx.HTTPError, DockerResponseError) as exc:
        _stage_failed("inspect", exc, container_id=container_id)
        raise InspectFailedError(
            container_id, f"Failed to inspect container {container_id}: {_describe(exc)}"
        ) from exc
    if details is None:
        logger.error(
            "Container disappeared before inspect",
            extra={
                "event": LogEvent.STAGE_FAILED,
                "stage": "inspect",
                "container_id": container_id,
            },
        )
        raise InspectFailedError(container_id, f"Container {container_id} not found")
    if not details.get("Id"):
        raise InspectFailedError(container_id, f"Inspect of {container_id} returned no Id")
    logger.debug(
        "Inspected container",
        extra={"event": LogEvent.CONTAINER_INSPECTED, "container_id": container_id},
    )
    return details


async def remove_container(client: DockerClient, container_id: str) -> None:
    """Force-remove a container (`docker rm -f`).

    Also the way to clean up after StartFailedError or InspectFailedError,
    using their resource_id.
    """
    try:
        await client.containers.remove(container_id, force=True)
    except httpx.HTTPError as exc:
        _stage_failed("delete", exc, container_id=container_id)
        raise DeleteFailedError(
            container_id, f"Failed to remove container {container_id}: {_describe(exc)}"
        ) from exc
    logger.info(
        "Removed container",
        extra={"event": LogEvent.CONTAINER_REMOVED, "container_id": container_id},
    )


# =============================================================================
# Network stages
# =============================================================================


async def create_network(client: DockerClient, config: NetworkConfig) -> str:
    """Create a network and return its id. Networks need no start stage."""
    try:
        network_id = await client.networks.create(config)
    except (httpx.HTTPError, DockerResponseError) as exc:
        _stage_failed("create", exc, network=config.name)
        raise CreateFailedError(
            f"Failed to create network {config.name}: {_describe(exc)}"
        ) from exc
    logger.info(
        "Created network",
        extra={"event": LogEvent.NETWORK_CREATED, "network": config.name, "network_id": network_id},
    )
    return network_id


async def remove_network(client: DockerClient, network_id: str) -> None:
    """Remove a network."""
    try:
        await client.networks.remove(network_id)
    except httpx.HTTPError as exc:
        _stage_failed("delete", exc, network_id=network_id)
        raise DeleteFailedError(
            network_id, f"Failed to remove network {network_id}: {_describe(exc)}"
        ) from exc
    logger.info(
        "Removed network",
        extra={"event": LogEvent.NETWORK_REMOVED, "network_id": network_id},
    )
