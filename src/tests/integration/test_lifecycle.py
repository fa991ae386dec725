"""Integration tests against a real Docker daemon."""

import re

import pytest

from harbourmaster import (
    Container,
    ContainerBuilder,
    CreateFailedError,
    DeleteFailedError,
    DockerClient,
    NetworkBuilder,
    Protocol,
    PullFailedError,
    remove_container,
)

pytestmark = pytest.mark.integration

SLEEP = ["sleep", "300"]


class TestContainerLifecycle:
    async def test_pull_build_delete(self, docker_client: DockerClient):
        progress: list[dict] = []

        container = await (
            ContainerBuilder("alpine", client=docker_client)
            .commands(SLEEP)
            .pull_on_build()
            .on_pull_progress(progress.append)
            .build()
        )
        try:
            assert container.id
            assert container.details["State"]["Running"] is True
            assert progress
        finally:
            await container.delete()

        assert await docker_client.containers.inspect(container.id) is None

    async def test_slugged_name_and_ports(self, docker_client: DockerClient, test_prefix: str):
        base = f"{test_prefix}web"

        async with (
            ContainerBuilder("alpine", client=docker_client)
            .name(base)
            .slug_length(6)
            .expose(8080, 0, Protocol.TCP)
            .environment_variable("HM_TEST=1")
            .commands(SLEEP)
            .scoped()
        ) as container:
            assert re.fullmatch(rf"{re.escape(base)}_[A-Za-z0-9]{{6}}", container.name)
            bindings = container.ports()[(8080, Protocol.TCP)]
            assert bindings
            assert all(b.port > 0 for b in bindings)
            assert "HM_TEST=1" in container.details["Config"]["Env"]

    async def test_duplicate_name_fails(self, docker_client: DockerClient, test_prefix: str):
        name = f"{test_prefix}dup"
        builder = ContainerBuilder("alpine", client=docker_client).name(name).commands(SLEEP)

        async with builder.scoped():
            with pytest.raises(CreateFailedError):
                await builder.build()

    async def test_delete_after_out_of_band_removal(self, docker_client: DockerClient):
        container = await ContainerBuilder("alpine", client=docker_client).commands(SLEEP).build()

        await remove_container(docker_client, container.id)

        with pytest.raises(DeleteFailedError):
            await container.delete()

    async def test_pull_unknown_image(self, docker_client: DockerClient, test_prefix: str):
        with pytest.raises(PullFailedError):
            await (
                ContainerBuilder(f"harbourmaster/{test_prefix}does-not-exist", client=docker_client)
                .pull_on_build()
                .build()
            )

    async def test_default_client(self):
        container = await Container.pull("alpine")
        await container.delete()


class TestNetworkLifecycle:
    async def test_create_delete(self, docker_client: DockerClient, test_prefix: str):
        network = await NetworkBuilder(f"{test_prefix}net", client=docker_client).build()

        assert network.id
        await network.delete()

        with pytest.raises(DeleteFailedError):
            await network.delete()

    async def test_scoped(self, docker_client: DockerClient, test_prefix: str):
        async with NetworkBuilder(f"{test_prefix}scoped", client=docker_client).scoped() as network:
            assert network.id

        assert network.deleted
