import asyncio
import json
import logging
from pathlib import Path
from typing import List

import aiofiles
import aiofiles.os

from gluetun_fleet.domain.container import ContainerConfig
from gluetun_fleet.domain.errors import NotFound, PortInUse, RegistryError, ValidationError
from gluetun_fleet.domain.ports import ContainerRegistry

logger = logging.getLogger(__name__)


class JSONContainerRegistry(ContainerRegistry):
    """
    Registry kept as one JSON document mapping container name to its config.

    Every mutation is a read-modify-write of the whole document and runs under
    a single lock, so concurrent requests in this process cannot lose updates.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    # -------------------------------
    # Reads
    # -------------------------------
    async def load(self) -> dict[str, ContainerConfig]:
        return await self._read()

    async def get(self, name: str) -> ContainerConfig | None:
        return (await self._read()).get(name)

    async def list(self) -> List[ContainerConfig]:
        return list((await self._read()).values())

    async def used_ports(self) -> List[int]:
        ports: List[int] = []
        for config in (await self._read()).values():
            ports.extend(config.ports)
        return ports

    # -------------------------------
    # Mutations
    # -------------------------------
    async def add(self, config: ContainerConfig) -> None:
        async with self._lock:
            configs = await self._read()
            if config.name in configs:
                raise ValidationError(f"Container {config.name} already exists")

            # Last-moment uniqueness check, inside the critical section
            used = {port for other in configs.values() for port in other.ports}
            if config.control_port in used:
                raise PortInUse(config.control_port, "Control port")
            if config.proxy_port in used:
                raise PortInUse(config.proxy_port, "Proxy port")

            configs[config.name] = config
            await self._write(configs)

    async def remove(self, name: str) -> None:
        async with self._lock:
            configs = await self._read()
            if configs.pop(name, None) is None:
                logger.debug(f"Registry has no entry for {name}, nothing to remove")
                return
            await self._write(configs)

    async def update_country(self, name: str, country: str) -> ContainerConfig:
        async with self._lock:
            configs = await self._read()
            config = configs.get(name)
            if config is None:
                raise NotFound(name)
            config.country = country
            await self._write(configs)
            return config

    #-----------------------------------------------------------------------------
    #
    #  Internal methods
    #
    #-----------------------------------------------------------------------------
    async def _read(self) -> dict[str, ContainerConfig]:
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except FileNotFoundError:
            return {}

        if not raw.strip():
            return {}

        try:
            document = json.loads(raw)
            return {
                name: ContainerConfig.from_document(name, doc)
                for name, doc in document.items()
            }
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise RegistryError(f"Registry document {self.path} is unreadable: {exc}")

    async def _write(self, configs: dict[str, ContainerConfig]) -> None:
        document = {name: config.to_document() for name, config in configs.items()}
        if self.path.parent != Path("."):
            await aiofiles.os.makedirs(self.path.parent, exist_ok=True)

        # Write next to the document, then swap it in atomically
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(document, indent=2))
        await aiofiles.os.replace(tmp_path, self.path)
