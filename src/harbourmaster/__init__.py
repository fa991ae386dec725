"""High-level async abstractions of Docker containers and networks.

Particularly useful for tests that spin up and then remove containers:

    from harbourmaster import Container

    container = await Container.new("alpine")
    ...
    await container.delete()
"""

from harbourmaster.container import Container, ContainerBuilder, ContainerSpec
from harbourmaster.errors import (
    CreateFailedError,
    DeleteFailedError,
    ErrorCode,
    HarbourmasterError,
    InspectFailedError,
    PullFailedError,
    StartFailedError,
)
from harbourmaster.infra.docker import DockerClient, close_docker, get_docker_client
from harbourmaster.logging import setup_logging
from harbourmaster.network import Network, NetworkBuilder, NetworkSpec
from harbourmaster.pipeline import remove_container, remove_network
from harbourmaster.port import HostPort, PortMapping, Protocol

__all__ = [
    # Resources
    "Container",
    "ContainerBuilder",
    "ContainerSpec",
    "Network",
    "NetworkBuilder",
    "NetworkSpec",
    # Values
    "HostPort",
    "PortMapping",
    "Protocol",
    # Client
    "DockerClient",
    "close_docker",
    "get_docker_client",
    # Logging
    "setup_logging",
    # Manual cleanup
    "remove_container",
    "remove_network",
    # Errors
    "ErrorCode",
    "HarbourmasterError",
    "PullFailedError",
    "CreateFailedError",
    "StartFailedError",
    "InspectFailedError",
    "DeleteFailedError",
]
