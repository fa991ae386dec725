"""Fixtures for unit tests."""

from collections.abc import AsyncIterator, Callable
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from harbourmaster.infra import ContainerAPI, DockerClient, ImageAPI, NetworkAPI

CONTAINER_ID = "4f9a1c2b3d4e5f60718293a4b5c6d7e8f90123456789abcdef0123456789abcd"


async def _progress_stream(
    chunks: list[dict], error: Exception | None = None
) -> AsyncIterator[dict]:
    """Stand-in for ImageAPI.pull: yields chunks, then optionally raises."""
    for chunk in chunks:
        yield chunk
    if error is not None:
        raise error


@pytest.fixture
def progress_stream() -> Callable[..., AsyncIterator[dict]]:
    """Factory for fake image pull progress streams."""
    return _progress_stream


@pytest.fixture
def http_error() -> Callable[..., httpx.HTTPStatusError]:
    """Factory for Engine API error responses."""

    def _make(status_code: int, message: str = "engine error") -> httpx.HTTPStatusError:
        request = httpx.Request("POST", "http://docker/containers/create")
        response = httpx.Response(status_code, json={"message": message}, request=request)
        return httpx.HTTPStatusError(message, request=request, response=response)

    return _make


@pytest.fixture
def inspect_payload() -> dict:
    """Trimmed Engine inspect response of a running container."""
    return {
        "Id": CONTAINER_ID,
        "Name": "/test_container_Ab3xYz",
        "State": {"Running": True, "Status": "running"},
        "NetworkSettings": {
            "Ports": {
                "5984/tcp": [
                    {"HostIp": "0.0.0.0", "HostPort": "5984"},
                    {"HostIp": "::", "HostPort": "5984"},
                ],
                "4369/tcp": None,
                "53/udp": [{"HostIp": "0.0.0.0", "HostPort": "5353"}],
                "9899/sctp": [{"HostIp": "0.0.0.0", "HostPort": "9899"}],
            }
        },
    }


@pytest.fixture
def mock_container_api(inspect_payload: dict) -> AsyncMock:
    """Mock ContainerAPI for testing."""
    api = AsyncMock(spec=ContainerAPI)
    api.create = AsyncMock(return_value=CONTAINER_ID)
    api.start = AsyncMock()
    api.inspect = AsyncMock(return_value=inspect_payload)
    api.remove = AsyncMock()
    return api


@pytest.fixture
def mock_image_api() -> MagicMock:
    """Mock ImageAPI for testing. pull() returns an empty progress stream."""
    api = MagicMock(spec=ImageAPI)
    api.pull = MagicMock(side_effect=lambda image_ref: _progress_stream([]))
    return api


@pytest.fixture
def mock_network_api() -> AsyncMock:
    """Mock NetworkAPI for testing."""
    api = AsyncMock(spec=NetworkAPI)
    api.create = AsyncMock(return_value="net-0123456789ab")
    api.remove = AsyncMock()
    return api


@pytest.fixture
def mock_docker_client(
    mock_container_api: AsyncMock,
    mock_image_api: MagicMock,
    mock_network_api: AsyncMock,
) -> MagicMock:
    """DockerClient whose API accessors return the mocks above."""
    client = MagicMock(spec=DockerClient)
    client.containers = mock_container_api
    client.images = mock_image_api
    client.networks = mock_network_api
    return client
