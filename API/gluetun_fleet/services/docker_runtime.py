import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, List

from docker import DockerClient, from_env
from docker.errors import DockerException, NotFound as DockerNotFound

from gluetun_fleet.domain.container import ContainerSpec, LiveContainer
from gluetun_fleet.domain.errors import AlreadyInState, FleetRuntimeError, NotFound
from gluetun_fleet.domain.ports import ContainerRuntime

logger = logging.getLogger(__name__)


class DockerSDKRuntime(ContainerRuntime):
    def __init__(self, docker_client: DockerClient | None = None):
        self._docker_client = docker_client

    @property
    def docker_client(self) -> DockerClient:
        # Connect on first use so the app can be built without a daemon
        if self._docker_client is None:
            try:
                self._docker_client = from_env()
            except DockerException as e:
                raise FleetRuntimeError(f"Cannot connect to Docker: {e}")
        return self._docker_client

    # -------------------------------
    # Queries
    # -------------------------------
    async def list_containers(self, marker: str) -> List[LiveContainer]:
        try:
            containers = await asyncio.to_thread(
                self.docker_client.containers.list,
                all=True,
                sparse=True,
                filters={"name": marker},
            )
        except DockerException as e:
            raise FleetRuntimeError(f"Docker list failed: {e}")

        live = [self._to_live(c.attrs) for c in containers]
        return [c for c in live if marker in c.name]

    async def find(self, name: str) -> LiveContainer | None:
        for container in await self.list_containers(name):
            if container.name == name:
                return container
        return None

    # -------------------------------
    # Container lifecycle
    # -------------------------------
    async def create(self, spec: ContainerSpec) -> str:
        """Create a container from spec and return its docker id."""
        try:
            docker_container = await asyncio.to_thread(
                self.docker_client.containers.create,
                spec.image,
                name=spec.name,
                hostname=spec.hostname,
                environment=spec.environment,
                cap_add=spec.cap_add,
                devices=spec.devices,
                ports=spec.ports,
                volumes=spec.volumes,
                restart_policy={"Name": spec.restart_policy},
            )
        except DockerException as e:
            raise FleetRuntimeError(f"Docker create failed: {e}")
        logger.info(f"Docker container created: {spec.name} ({docker_container.id[:12]})")
        return docker_container.id

    async def start(self, ref: str) -> None:
        container = await self._get(ref)
        if container.status == "running":
            raise AlreadyInState(ref, "running")
        try:
            await asyncio.to_thread(container.start)
        except DockerException as e:
            raise FleetRuntimeError(f"Docker start failed for {ref}: {e}")

    async def stop(self, ref: str) -> None:
        container = await self._get(ref)
        if container.status != "running":
            raise AlreadyInState(ref, "stopped")
        try:
            await asyncio.to_thread(container.stop)
        except DockerException as e:
            raise FleetRuntimeError(f"Docker stop failed for {ref}: {e}")

    async def remove(self, ref: str, force: bool = False) -> None:
        container = await self._get(ref)
        try:
            await asyncio.to_thread(container.remove, force=force)
        except DockerException as e:
            raise FleetRuntimeError(f"Docker remove failed for {ref}: {e}")

    # -------------------------------
    # Volumes
    # -------------------------------
    async def remove_volume(self, name: str) -> None:
        try:
            volume = await asyncio.to_thread(self.docker_client.volumes.get, name)
            await asyncio.to_thread(volume.remove)
        except DockerNotFound:
            raise NotFound(name, f"Volume {name} not found")
        except DockerException as e:
            raise FleetRuntimeError(f"Docker volume remove failed for {name}: {e}")

    #-----------------------------------------------------------------------------
    #
    #  Internal methods
    #
    #-----------------------------------------------------------------------------
    async def _get(self, ref: str):
        try:
            return await asyncio.to_thread(self.docker_client.containers.get, ref)
        except DockerNotFound:
            raise NotFound(ref)
        except DockerException as e:
            raise FleetRuntimeError(f"Docker lookup failed for {ref}: {e}")

    @staticmethod
    def _to_live(attrs: dict[str, Any]) -> LiveContainer:
        """Build a LiveContainer from a `docker ps`-style listing entry."""
        names = attrs.get("Names") or [""]
        created = attrs.get("Created")
        return LiveContainer(
            name=names[0].lstrip("/"),
            id=attrs.get("Id", ""),
            state=attrs.get("State", ""),
            status=attrs.get("Status", ""),
            created_at=datetime.fromtimestamp(created, tz=timezone.utc)
            if isinstance(created, (int, float))
            else None,
        )
