from typing import Any, Protocol, List
from pathlib import Path

from gluetun_fleet.domain.container import (
    ContainerConfig,
    ContainerSpec,
    Credentials,
    LiveContainer,
)


class ContainerRegistry(Protocol):
    async def load(self) -> dict[str, ContainerConfig]: ...

    async def get(self, name: str) -> ContainerConfig | None: ...

    async def list(self) -> List[ContainerConfig]: ...

    async def add(self, config: ContainerConfig) -> None: ...

    async def remove(self, name: str) -> None: ...

    async def update_country(self, name: str, country: str) -> ContainerConfig: ...

    async def used_ports(self) -> List[int]: ...


class ContainerRuntime(Protocol):
    async def list_containers(self, marker: str) -> List[LiveContainer]:
        """All containers, running or not, whose name contains marker."""
        ...

    async def find(self, name: str) -> LiveContainer | None:
        """Look up a container by exact name."""
        ...

    async def create(self, spec: ContainerSpec) -> str:
        """Create (but do not start) a container. Returns its id."""
        ...

    async def start(self, ref: str) -> None: ...

    async def stop(self, ref: str) -> None: ...

    async def remove(self, ref: str, force: bool = False) -> None: ...

    async def remove_volume(self, name: str) -> None: ...


class CredentialProvider(Protocol):
    async def ensure_auth_file(self) -> Path:
        """Make sure the auth file exists and return its absolute path."""
        ...

    async def get_credentials(self) -> Credentials: ...


class ControlClient(Protocol):
    async def get_public_ip(self, port: int, credentials: Credentials) -> dict[str, Any]: ...

    async def update_countries(
        self,
        port: int,
        credentials: Credentials,
        countries: list[str],
    ) -> None: ...
