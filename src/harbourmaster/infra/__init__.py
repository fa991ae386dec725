"""Docker Engine API access layer."""

from harbourmaster.infra.docker import (
    ContainerAPI,
    ContainerConfig,
    DockerClient,
    DockerResponseError,
    DockerStreamError,
    ImageAPI,
    NetworkAPI,
    NetworkConfig,
    close_docker,
    get_docker_client,
)

__all__ = [
    "ContainerAPI",
    "ContainerConfig",
    "DockerClient",
    "DockerResponseError",
    "DockerStreamError",
    "ImageAPI",
    "NetworkAPI",
    "NetworkConfig",
    "close_docker",
    "get_docker_client",
]
