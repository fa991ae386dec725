"""Docker Engine API client.

Provides async Docker API access for images, containers and networks.
Supports both Unix socket and TCP connections.

Configuration via DockerConfig (HARBOURMASTER_DOCKER_ env prefix).
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator

import httpx
from pydantic import BaseModel

from harbourmaster.config import DockerConfig, get_config
from harbourmaster.port import PortMapping

logger = logging.getLogger(__name__)


class DockerResponseError(Exception):
    """Raised when an Engine response body cannot be understood."""

    def __init__(self, message: str, detail: dict | None = None) -> None:
        self.detail = detail or {}
        super().__init__(message)


class DockerStreamError(DockerResponseError):
    """Raised when a streamed Engine response reports an error mid-stream.

    The Engine answers /images/create with 200 and reports failures as
    {"error": ..., "errorDetail": {...}} chunks inside the stream. A line that
    is not a JSON object is reported the same way.
    """


# =============================================================================
# Pydantic Models
# =============================================================================


class ContainerConfig(BaseModel):
    """Docker container configuration for creation."""

    image: str
    name: str | None = None
    cmd: list[str] = []
    env: list[str] = []
    ports: list[PortMapping] = []

    model_config = {"frozen": True}

    def to_api(self) -> dict:
        """Convert to Docker API JSON format."""
        exposed_ports: dict[str, dict] = {}
        port_bindings: dict[str, list[dict[str, str]]] = {}
        for port in self.ports:
            exposed_ports[port.key] = {}
            port_bindings.setdefault(port.key, []).append({"HostPort": str(port.host)})

        result: dict = {
            "Image": self.image,
            "ExposedPorts": exposed_ports,
            "HostConfig": {"PortBindings": port_bindings},
        }
        # An empty Cmd would override the image default
        if self.cmd:
            result["Cmd"] = self.cmd
        if self.env:
            result["Env"] = self.env
        return result


class NetworkConfig(BaseModel):
    """Docker network configuration for creation."""

    name: str
    driver: str = "bridge"
    labels: dict[str, str] = {}

    model_config = {"frozen": True}

    def to_api(self) -> dict:
        """Convert to Docker API format."""
        result: dict = {"Name": self.name, "Driver": self.driver}
        if self.labels:
            result["Labels"] = self.labels
        return result


# =============================================================================
# Docker Client (shared handle)
# =============================================================================


class DockerClient:
    """Async Docker API client.

    One instance owns one httpx connection pool and may be shared by any
    number of builders and handles, including concurrently running ones.
    """

    def __init__(
        self,
        docker_host: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = get_config().docker
        self._host = docker_host or self._config.host
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def host(self) -> str:
        return self._host

    @property
    def config(self) -> DockerConfig:
        return self._config

    def _create_client(self) -> httpx.AsyncClient:
        """Create a new HTTP client."""
        timeout = self._config.api_timeout
        if self._transport is not None:
            return httpx.AsyncClient(
                transport=self._transport,
                base_url="http://docker",
                timeout=timeout,
            )
        if self._host.startswith("unix://"):
            socket_path = self._host.replace("unix://", "")
            transport = httpx.AsyncHTTPTransport(uds=socket_path)
            return httpx.AsyncClient(
                transport=transport,
                base_url="http://localhost",
                timeout=timeout,
            )
        base_url = self._host
        if base_url.startswith("tcp://"):
            base_url = base_url.replace("tcp://", "http://")
        return httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def get(self) -> httpx.AsyncClient:
        """Get or create the HTTP client.

        Pooled connections belong to the event loop that opened them, so the
        client is recreated when it was closed or when called from another
        loop (e.g. one loop per test). A client left behind by a finished
        loop is dropped without aclose(); its loop can no longer run it.
        """
        loop = asyncio.get_running_loop()
        if self._client is None or self._client.is_closed or self._loop is not loop:
            self._client = self._create_client()
            self._loop = loop
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if it belongs to the running loop."""
        if (
            self._client
            and not self._client.is_closed
            and self._loop is asyncio.get_running_loop()
        ):
            await self._client.aclose()
        self._client = None
        self._loop = None

    @property
    def containers(self) -> ContainerAPI:
        return ContainerAPI(self)

    @property
    def images(self) -> ImageAPI:
        return ImageAPI(self)

    @property
    def networks(self) -> NetworkAPI:
        return NetworkAPI(self)


# Global singleton
_docker_client: DockerClient | None = None


def get_docker_client() -> DockerClient:
    """Get the process-wide shared Docker client, creating it on first use."""
    global _docker_client
    if _docker_client is None:
        _docker_client = DockerClient()
    return _docker_client


async def close_docker() -> None:
    """Close the global Docker client."""
    global _docker_client
    if _docker_client:
        await _docker_client.close()
        _docker_client = None


# =============================================================================
# Response decoding
# =============================================================================


def _json_object(resp: httpx.Response) -> dict:
    """Decode a JSON object body."""
    try:
        body = resp.json()
    except ValueError as exc:
        raise DockerResponseError(
            f"Malformed response from {resp.request.url.path}: {resp.text[:200]!r}"
        ) from exc
    if not isinstance(body, dict):
        raise DockerResponseError(f"Unexpected response from {resp.request.url.path}: {body!r}")
    return body


def _created_id(resp: httpx.Response) -> str:
    """Id of the object a create call returned."""
    body = _json_object(resp)
    created_id = body.get("Id")
    if not created_id or not isinstance(created_id, str):
        raise DockerResponseError(f"No Id in response from {resp.request.url.path}", body)
    return created_id


# =============================================================================
# Container API
# =============================================================================


class ContainerAPI:
    """Docker Container API operations."""

    def __init__(self, client: DockerClient | None = None) -> None:
        self._docker = client or get_docker_client()

    async def create(self, config: ContainerConfig) -> str:
        """Create a container and return its id.

        Name collisions (409) are not masked.
        A body without an Id raises DockerResponseError.
        """
        client = await self._docker.get()
        params = {"name": config.name} if config.name is not None else None
        resp = await client.post("/containers/create", params=params, json=config.to_api())
        resp.raise_for_status()
        container_id = _created_id(resp)
        logger.debug("Created container: %s (%s)", config.name, container_id)
        return container_id

    async def start(self, container_id: str) -> None:
        """Start a container. Already running (304) counts as success."""
        client = await self._docker.get()
        resp = await client.post(f"/containers/{container_id}/start")
        if resp.status_code not in (204, 304):
            resp.raise_for_status()
        logger.debug("Started container: %s", container_id)

    async def inspect(self, container_id: str) -> dict | None:
        """Inspect a container. Returns None if it does not exist."""
        client = await self._docker.get()
        resp = await client.get(f"/containers/{container_id}/json")
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return _json_object(resp)

    async def remove(self, container_id: str, force: bool = True) -> None:
        """Remove a container. A missing container (404) raises."""
        client = await self._docker.get()
        resp = await client.delete(
            f"/containers/{container_id}", params={"force": "true" if force else "false"}
        )
        resp.raise_for_status()
        logger.debug("Removed container: %s", container_id)


# =============================================================================
# Image API
# =============================================================================


def split_image_ref(image_ref: str) -> tuple[str, str]:
    """Split "name:tag" into its parts. A registry port is not a tag."""
    name, sep, tag = image_ref.rpartition(":")
    if not sep or "/" in tag:
        return image_ref, "latest"
    return name, tag


class ImageAPI:
    """Docker Image API operations."""

    def __init__(self, client: DockerClient | None = None) -> None:
        self._docker = client or get_docker_client()

    async def pull(self, image_ref: str) -> AsyncIterator[dict]:
        """Pull image from registry, yielding progress chunks.

        The response stream stays open until the iterator is exhausted;
        callers must drain it for the pull to complete.

        Raises:
            httpx.HTTPStatusError: the Engine rejected the request.
            DockerStreamError: the Engine reported an error mid-stream, or
                sent a line that is not a JSON object.
        """
        client = await self._docker.get()
        image, tag = split_image_ref(image_ref)

        async with client.stream(
            "POST",
            "/images/create",
            params={"fromImage": image, "tag": tag},
            timeout=self._docker.config.image_pull_timeout,
        ) as resp:
            if resp.is_error:
                await resp.aread()
                resp.raise_for_status()
            async for line in resp.aiter_lines():
                if not line.strip():
                    continue
                try:
                    chunk = json.loads(line)
                except ValueError as exc:
                    raise DockerStreamError(f"Malformed progress line: {line[:200]!r}") from exc
                if not isinstance(chunk, dict):
                    raise DockerStreamError(f"Unexpected progress line: {line[:200]!r}")
                if "error" in chunk:
                    raise DockerStreamError(chunk["error"], chunk.get("errorDetail"))
                yield chunk


# =============================================================================
# Network API
# =============================================================================


class NetworkAPI:
    """Docker Network API operations."""

    def __init__(self, client: DockerClient | None = None) -> None:
        self._docker = client or get_docker_client()

    async def create(self, config: NetworkConfig) -> str:
        """Create a network and return its id."""
        client = await self._docker.get()
        resp = await client.post("/networks/create", json=config.to_api())
        resp.raise_for_status()
        network_id = _created_id(resp)
        logger.debug("Created network: %s (%s)", config.name, network_id)
        return network_id

    async def remove(self, network_id: str) -> None:
        """Remove a network. A missing network (404) raises."""
        client = await self._docker.get()
        resp = await client.delete(f"/networks/{network_id}")
        resp.raise_for_status()
        logger.debug("Removed network: %s", network_id)
