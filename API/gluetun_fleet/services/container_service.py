# gluetun_fleet/services/container_service.py
import asyncio
import logging
from typing import Any, List

from gluetun_fleet.core.config import Settings
from gluetun_fleet.domain.container import (
    ContainerConfig,
    ContainerView,
    CountryChangeResult,
    next_container_name,
)
from gluetun_fleet.domain.errors import FleetError, NotFound, PortInUse, ValidationError
from gluetun_fleet.domain.ports import (
    ContainerRegistry,
    ContainerRuntime,
    ControlClient,
    CredentialProvider,
)
from gluetun_fleet.services.container_spec import build_gateway_spec, volume_name
from gluetun_fleet.services.country_change import ReconnectVerifier
from gluetun_fleet.services.port_allocator import PortAllocator

logger = logging.getLogger(__name__)


class ContainerService:
    def __init__(
        self,
        registry: ContainerRegistry,
        runtime: ContainerRuntime,
        credentials: CredentialProvider,
        control_client: ControlClient,
        settings: Settings,
        verifier: ReconnectVerifier | None = None,
    ):
        self.registry = registry
        self.runtime = runtime
        self.credentials = credentials
        self.control_client = control_client
        self.settings = settings
        self.allocator = PortAllocator.from_settings(settings)
        self.verifier = verifier or ReconnectVerifier(
            attempts=settings.RECONNECT_ATTEMPTS,
            interval=settings.RECONNECT_INTERVAL_S,
        )
        # Serialises registry-mutating operations
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        await self.credentials.ensure_auth_file()

    # -------------------------------
    # Queries
    # -------------------------------
    async def list_containers(self) -> List[ContainerView]:
        """
        Merge live runtime containers with their registry entries.
        Containers unknown to the registry are listed without config fields;
        registry entries with no live container are left out.
        """
        configs = await self.registry.load()
        live = await self.runtime.list_containers(self.settings.CONTAINER_PREFIX)

        views = [ContainerView.merge(c, configs.get(c.name)) for c in live]

        stale = set(configs) - {c.name for c in live}
        if stale:
            logger.debug(f"Registry entries without a container: {sorted(stale)}")
        return views

    async def next_container_name(self) -> str:
        live = await self.runtime.list_containers(self.settings.CONTAINER_PREFIX)
        return next_container_name(
            (c.name for c in live), self.settings.CONTAINER_PREFIX
        )

    async def available_ports(self) -> tuple[int, int]:
        return self.allocator.next_available(await self.registry.used_ports())

    async def get_status(self, name: str) -> dict[str, Any]:
        """
        Ask the container's control server for its public IP details.
        Unreachable containers yield an error payload instead of raising.
        """
        config = await self.registry.get(name)
        if config is None:
            raise NotFound(name, f"Container {name} not found in config")

        try:
            creds = await self.credentials.get_credentials()
            return await self.control_client.get_public_ip(config.control_port, creds)
        except FleetError as exc:
            return {"error": "Unable to fetch status", "message": exc.message}

    # -------------------------------
    # CRUD
    # -------------------------------
    async def create_container(
        self,
        *,
        name: str,
        private_key: str,
        address: str,
        country: str,
        control_port: int,
        proxy_port: int,
    ) -> dict[str, Any]:
        """
        Create and start a gluetun container. The registry only gains the
        entry once the container is running.
        """
        auth_file = await self.credentials.ensure_auth_file()
        self.allocator.validate(control_port, proxy_port)

        async with self._lock:
            configs = await self.registry.load()
            if name in configs:
                raise ValidationError(f"Container {name} already exists")
            used = {port for c in configs.values() for port in c.ports}
            if control_port in used:
                raise PortInUse(control_port, "Control port")
            if proxy_port in used:
                raise PortInUse(proxy_port, "Proxy port")

            config = ContainerConfig(
                name=name,
                control_port=control_port,
                proxy_port=proxy_port,
                country=country,
                private_key=private_key,
                address=address,
            )
            spec = build_gateway_spec(config, auth_file, self.settings)

            docker_id = await self.runtime.create(spec)
            try:
                await self.runtime.start(docker_id)
            except Exception:
                await self._discard(docker_id, name)
                raise

            try:
                await self.registry.add(config)
            except Exception:
                await self._discard(docker_id, name, force=True)
                raise

        logger.info(f"Container {name} created and started (control {control_port}, proxy {proxy_port})")
        return {
            "id": docker_id,
            "name": name,
            "controlPort": control_port,
            "proxyPort": proxy_port,
        }

    async def delete_container(self, name: str) -> None:
        async with self._lock:
            live = await self.runtime.find(name)
            if live is None:
                raise NotFound(name)

            if live.state == "running":
                await self.runtime.stop(live.id)
            await self.runtime.remove(live.id)

            volume = volume_name(self.settings, name)
            try:
                await self.runtime.remove_volume(volume)
                logger.info(f"Removed volume: {volume}")
            except FleetError as exc:
                logger.warning(f"Failed to remove volume {volume}: {exc.message}")

            await self.registry.remove(name)
        logger.info(f"Container {name} deleted")

    # -------------------------------
    # Docker lifecycle
    # -------------------------------
    async def start_container(self, name: str) -> None:
        await self.runtime.start(name)
        logger.info(f"Container {name} started")

    async def stop_container(self, name: str) -> None:
        await self.runtime.stop(name)
        logger.info(f"Container {name} stopped")

    # --------------------------------------------------------
    #
    #       COUNTRY CHANGE
    #
    # --------------------------------------------------------
    async def change_country(self, name: str, country: str) -> CountryChangeResult:
        """
        Point a running container at another exit country and wait (bounded)
        for the VPN to come back with a different public IP.
        """
        config = await self.registry.get(name)
        if config is None:
            raise NotFound(name)

        before = await self.get_status(name)
        old_ip = before.get("public_ip")

        creds = await self.credentials.get_credentials()
        await self.control_client.update_countries(
            config.control_port, creds, [country.lower()]
        )

        async with self._lock:
            await self.registry.update_country(name, country)
        logger.info(f"Country change for {name} to {country} submitted")

        return await self.verifier.verify(lambda: self.get_status(name), old_ip)

    #-----------------------------------------------------------------------------
    #
    #  Internal methods
    #
    #-----------------------------------------------------------------------------
    async def _discard(self, docker_id: str, name: str, force: bool = False) -> None:
        """Best-effort removal of a container that never made it into the registry."""
        try:
            await self.runtime.remove(docker_id, force=force)
        except Exception as exc:
            logger.error(f"Failed to cleanup container {name} after start failure: {exc}")
