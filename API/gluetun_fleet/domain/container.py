import re
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Any, Iterable


@dataclass
class ContainerConfig:
    """Declared configuration of a fleet container, as kept in the registry."""
    name: str
    control_port: int
    proxy_port: int
    country: str
    private_key: str
    address: str
    created_at: datetime = field(default_factory=lambda : datetime.now(timezone.utc))

    @property
    def ports(self) -> tuple[int, int]:
        return self.control_port, self.proxy_port

    def to_document(self) -> dict[str, Any]:
        return {
            "controlPort": self.control_port,
            "proxyPort": self.proxy_port,
            "country": self.country,
            "privateKey": self.private_key,
            "address": self.address,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_document(cls, name: str, doc: dict[str, Any]) -> "ContainerConfig":
        created_at = doc.get("createdAt")
        return cls(
            name=name,
            control_port=int(doc["controlPort"]),
            proxy_port=int(doc["proxyPort"]),
            country=doc.get("country", ""),
            private_key=doc.get("privateKey", ""),
            address=doc.get("address", ""),
            # JS-style timestamps end in "Z"
            created_at=datetime.fromisoformat(created_at.replace("Z", "+00:00"))
            if created_at
            else datetime.now(timezone.utc),
        )


@dataclass
class LiveContainer:
    """What the container runtime reports about a container right now."""
    name: str
    id: str
    state: str  # running / exited / created / ...
    status: str  # human readable, e.g. "Up 3 hours"
    created_at: datetime | None = None


@dataclass
class ContainerView:
    name: str
    id: str
    state: str
    status: str
    created: datetime | None = None
    control_port: int | None = None
    proxy_port: int | None = None
    country: str | None = None

    @classmethod
    def merge(cls, live: LiveContainer, config: ContainerConfig | None) -> "ContainerView":
        return cls(
            name=live.name,
            id=live.id,
            state=live.state,
            status=live.status,
            created=live.created_at,
            control_port=config.control_port if config else None,
            proxy_port=config.proxy_port if config else None,
            country=config.country if config else None,
        )


@dataclass
class ContainerSpec:
    """Runtime-agnostic description of a container to create."""
    image: str
    name: str
    hostname: str
    environment: dict[str, str]
    cap_add: list[str] = field(default_factory=list)
    devices: list[str] = field(default_factory=list)
    # container port ("8000/tcp") -> (host ip, host port)
    ports: dict[str, tuple[str, int]] = field(default_factory=dict)
    # host path or volume name -> {"bind": ..., "mode": ...}
    volumes: dict[str, dict[str, str]] = field(default_factory=dict)
    restart_policy: str = "unless-stopped"


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str


@dataclass
class CountryChangeResult:
    status: dict[str, Any]
    confirmed: bool
    attempts: int


def next_container_name(names: Iterable[str], prefix: str) -> str:
    """Return ``<prefix>-<max(N)+1>`` over names shaped ``<prefix>-<N>``."""
    pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)$")
    numbers = [int(m.group(1)) for m in map(pattern.match, names) if m]
    if not numbers:
        return f"{prefix}-1"
    return f"{prefix}-{max(numbers) + 1}"
