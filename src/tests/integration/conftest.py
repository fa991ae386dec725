"""Integration test fixtures.

Require a Docker daemon reachable through HARBOURMASTER_DOCKER_HOST
(default unix:///var/run/docker.sock).
"""

import uuid

import pytest
import pytest_asyncio

import harbourmaster.infra.docker as docker_module
from harbourmaster.infra import DockerClient

# Test resource prefix - clearly identifies test resources
TEST_PREFIX = "test-hm-"


@pytest.fixture
def test_prefix() -> str:
    """Unique prefix for test resources to avoid conflicts.

    Format: test-hm-{uuid8}- (e.g., test-hm-a1b2c3d4-)
    """
    return f"{TEST_PREFIX}{uuid.uuid4().hex[:8]}-"


@pytest.fixture(autouse=True)
async def reset_docker_client():
    """Start each test from a fresh global Docker client."""
    docker_module._docker_client = None
    yield
    if docker_module._docker_client:
        await docker_module._docker_client.close()
        docker_module._docker_client = None


@pytest_asyncio.fixture
async def docker_client():
    """Fresh DockerClient instance per test."""
    client = DockerClient()
    yield client
    await client.close()
