"""Docker networks: builder and handle.

Same pattern as containers with a single create stage; networks are ready
as soon as they exist. Networks are NOT removed when the handle is garbage
collected.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from pydantic import BaseModel

from harbourmaster.errors import DeleteFailedError
from harbourmaster.infra.docker import DockerClient, NetworkConfig, get_docker_client
from harbourmaster.pipeline import create_network, remove_network

logger = logging.getLogger(__name__)


class NetworkSpec(BaseModel):
    """Effective configuration of a network build."""

    name: str
    driver: str = "bridge"
    labels: dict[str, str] = {}

    model_config = {"frozen": True}

    def to_config(self) -> NetworkConfig:
        return NetworkConfig(name=self.name, driver=self.driver, labels=self.labels)


class NetworkBuilder:
    """Fluent configuration for a Network."""

    def __init__(self, name: str, client: DockerClient | None = None) -> None:
        self._name = name
        self._driver = "bridge"
        self._labels: dict[str, str] = {}
        self._client = client or get_docker_client()

    def driver(self, driver: str) -> NetworkBuilder:
        self._driver = driver
        return self

    def label(self, key: str, value: str) -> NetworkBuilder:
        self._labels[key] = value
        return self

    def client(self, client: DockerClient) -> NetworkBuilder:
        """Use a specific Docker client instead of the shared one."""
        self._client = client
        return self

    def spec(self) -> NetworkSpec:
        return NetworkSpec(name=self._name, driver=self._driver, labels=dict(self._labels))

    async def build(self) -> Network:
        """Create the network.

        Raises:
            CreateFailedError: the Engine rejected the network.
        """
        spec = self.spec()
        network_id = await create_network(self._client, spec.to_config())
        return Network(network_id, spec.name, self._client)

    @asynccontextmanager
    async def scoped(self) -> AsyncIterator[Network]:
        """Create a network and remove it when the block exits."""
        network = await self.build()
        try:
            yield network
        except BaseException:
            if not network.deleted:
                try:
                    await network.delete()
                except DeleteFailedError:
                    logger.warning("Failed to remove network %s", network.id, exc_info=True)
            raise
        if not network.deleted:
            await network.delete()


class Network:
    """Handle on a Docker network."""

    def __init__(self, network_id: str, name: str, client: DockerClient) -> None:
        self._id = network_id
        self._name = name
        self._client = client
        self._deleted = False

    @staticmethod
    def builder(name: str) -> NetworkBuilder:
        return NetworkBuilder(name)

    @classmethod
    async def new(cls, name: str) -> Network:
        return await NetworkBuilder(name).build()

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def deleted(self) -> bool:
        return self._deleted

    async def delete(self) -> None:
        """Remove the network. The handle is spent afterwards.

        Raises:
            DeleteFailedError: the Engine refused (e.g. containers still
                attached), the network is already gone, or this handle was
                already deleted.
        """
        if self._deleted:
            raise DeleteFailedError(self._id, f"Network {self._id} was already deleted")
        self._deleted = True
        await remove_network(self._client, self._id)

    def __repr__(self) -> str:
        return f"Network(id={self._id[:12]!r}, name={self._name!r})"
