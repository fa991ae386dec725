"""Docker containers: builder and handle.

A ContainerBuilder accumulates configuration and, on build(), drives the
pull/create/start/inspect stages in harbourmaster.pipeline. The resulting
Container is a handle on a running container.

Containers are NOT removed when the handle is garbage collected. Call
delete(), or use the opt-in ContainerBuilder.scoped() context manager:

    async with Container.builder("alpine").commands(["sleep", "60"]).scoped() as c:
        ...
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from pydantic import BaseModel

from harbourmaster.errors import DeleteFailedError
from harbourmaster.infra.docker import ContainerConfig, DockerClient, get_docker_client
from harbourmaster.pipeline import (
    PullProgressCallback,
    create_container,
    inspect_container,
    pull_image,
    remove_container,
    start_container,
)
from harbourmaster.port import HostPort, PortMapping, Protocol, parse_port_key
from harbourmaster.slug import slugged_name

logger = logging.getLogger(__name__)

DEFAULT_TAG = "latest"


class ContainerSpec(BaseModel):
    """Effective configuration of a container build."""

    image_name: str
    image_tag: str = DEFAULT_TAG
    name: str | None = None
    slug_length: int = 0
    ports: list[PortMapping] = []
    commands: list[str] = []
    env: list[str] = []
    pull_on_build: bool = False

    model_config = {"frozen": True}

    @property
    def image(self) -> str:
        return f"{self.image_name}:{self.image_tag}"

    def to_config(self) -> ContainerConfig:
        """Engine create request. Draws a fresh slug on every call."""
        return ContainerConfig(
            image=self.image,
            name=slugged_name(self.name, self.slug_length),
            cmd=self.commands,
            env=self.env,
            ports=self.ports,
        )


class ContainerBuilder:
    """Fluent configuration for a Container.

    Setters return the builder for chaining and do no validation; the Engine
    is the judge of image names, env strings and port conflicts.

    Example:
        container = await (
            Container.builder("couchdb")
            .tag("2.3.0")
            .name("test_container")
            .slug_length(6)
            .environment_variable("COUCHDB_USER=admin")
            .expose(5984, 5984, Protocol.TCP)
            .pull_on_build()
            .build()
        )
    """

    def __init__(self, image_name: str, client: DockerClient | None = None) -> None:
        self._image_name = image_name
        self._image_tag = DEFAULT_TAG
        self._name: str | None = None
        self._slug_length = 0
        self._ports: list[PortMapping] = []
        self._commands: list[str] = []
        self._env: list[str] = []
        self._pull_on_build = False
        self._on_pull_progress: PullProgressCallback | None = None
        self._client = client or get_docker_client()

    def tag(self, tag: str) -> ContainerBuilder:
        """Set the image tag. Defaults to "latest"; an empty tag keeps the default."""
        self._image_tag = tag or DEFAULT_TAG
        return self

    def name(self, name: str) -> ContainerBuilder:
        """Set the container name."""
        self._name = name
        return self

    def slug_length(self, length: int) -> ContainerBuilder:
        """Append a random alphanumeric slug to the name: "{name}_XXXX".

        Useful when creating containers in bulk with readable names but
        no collisions. 0 disables the slug.
        """
        self._slug_length = length
        return self

    def expose(
        self, source: int, host: int, protocol: Protocol = Protocol.TCP
    ) -> ContainerBuilder:
        """Publish container port `source` on host port `host`. Repeatable."""
        self._ports.append(PortMapping(source=source, host=host, protocol=protocol))
        return self

    def environment_variable(self, variable: str) -> ContainerBuilder:
        """Add one "KEY=VALUE" environment entry. Repeatable."""
        self._env.append(variable)
        return self

    def commands(self, commands: list[str]) -> ContainerBuilder:
        """Replace the startup command."""
        self._commands = list(commands)
        return self

    def pull_on_build(self, pull: bool = True) -> ContainerBuilder:
        """Pull the image from its registry before creating the container."""
        self._pull_on_build = pull
        return self

    def on_pull_progress(self, callback: PullProgressCallback | None) -> ContainerBuilder:
        """Receive every raw progress chunk of the image pull."""
        self._on_pull_progress = callback
        return self

    def client(self, client: DockerClient) -> ContainerBuilder:
        """Use a specific Docker client instead of the shared one."""
        self._client = client
        return self

    def spec(self) -> ContainerSpec:
        return ContainerSpec(
            image_name=self._image_name,
            image_tag=self._image_tag,
            name=self._name,
            slug_length=self._slug_length,
            ports=list(self._ports),
            commands=list(self._commands),
            env=list(self._env),
            pull_on_build=self._pull_on_build,
        )

    async def build(self) -> Container:
        """Pull (optionally), create, start and inspect the container.

        Raises:
            PullFailedError: nothing was created.
            CreateFailedError: nothing was created.
            StartFailedError: the container exists but is not running. It is
                not removed; see resource_id.
            InspectFailedError: the container is running without a handle.
                It is not removed; see resource_id.
        """
        spec = self.spec()
        client = self._client

        if spec.pull_on_build:
            await pull_image(client, spec.image, self._on_pull_progress)

        container_id = await create_container(client, spec.to_config())
        await start_container(client, container_id)
        details = await inspect_container(client, container_id)
        return Container(details, client)

    @asynccontextmanager
    async def scoped(self) -> AsyncIterator[Container]:
        """Build a container and remove it when the block exits.

        If the block raises, a removal failure is logged and the block's
        exception propagates.
        """
        container = await self.build()
        try:
            yield container
        except BaseException:
            if not container.deleted:
                try:
                    await container.delete()
                except DeleteFailedError:
                    logger.warning(
                        "Failed to remove container %s", container.id, exc_info=True
                    )
            raise
        if not container.deleted:
            await container.delete()


class Container:
    """Handle on a running Docker container.

    Use Container.new() for defaults or Container.builder() for full
    control. Dropping the handle leaves the container running.
    """

    def __init__(self, details: dict, client: DockerClient) -> None:
        self._details = details
        self._client = client
        self._deleted = False

    @staticmethod
    def builder(image_name: str) -> ContainerBuilder:
        return ContainerBuilder(image_name)

    @classmethod
    async def new(cls, image_name: str) -> Container:
        """Create and start a container from "{image_name}:latest"."""
        return await ContainerBuilder(image_name).build()

    @classmethod
    async def pull(cls, image_name: str) -> Container:
        """Like new(), pulling the image first."""
        return await ContainerBuilder(image_name).pull_on_build().build()

    @property
    def id(self) -> str:
        return self._details["Id"]

    @property
    def name(self) -> str | None:
        name = self._details.get("Name")
        return name.lstrip("/") if name else None

    @property
    def details(self) -> dict:
        """Engine inspect payload captured at build time."""
        return self._details

    @property
    def deleted(self) -> bool:
        return self._deleted

    def raw_ports(self) -> dict | None:
        """Engine port map verbatim, e.g. {"5984/tcp": [{"HostIp": ..., "HostPort": ...}]}."""
        return (self._details.get("NetworkSettings") or {}).get("Ports")

    def ports(self) -> dict[tuple[int, Protocol], list[HostPort]]:
        """Host sockets per (container port, protocol).

        Exposed but unpublished ports map to an empty list. Protocols other
        than tcp/udp (sctp) are only visible through raw_ports().
        """
        result: dict[tuple[int, Protocol], list[HostPort]] = {}
        for key, bindings in (self.raw_ports() or {}).items():
            try:
                source = parse_port_key(key)
            except ValueError:
                continue
            result[source] = [
                HostPort(ip=binding.get("HostIp", ""), port=int(binding["HostPort"]))
                for binding in bindings or []
            ]
        return result

    async def delete(self) -> None:
        """Force-remove the container (`docker rm -f`).

        The handle is spent afterwards, whether or not removal succeeded.

        Raises:
            DeleteFailedError: the Engine refused, the container is already
                gone, or this handle was already deleted.
        """
        if self._deleted:
            raise DeleteFailedError(self.id, f"Container {self.id} was already deleted")
        self._deleted = True
        await remove_container(self._client, self.id)

    def __repr__(self) -> str:
        return f"Container(id={self.id[:12]!r}, name={self.name!r})"
