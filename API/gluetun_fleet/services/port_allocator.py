from dataclasses import dataclass
from typing import Iterable

from gluetun_fleet.core.config import Settings
from gluetun_fleet.domain.errors import RangeExhausted, ValidationError


@dataclass(frozen=True)
class PortRange:
    kind: str
    start: int
    end: int

    def __contains__(self, port: object) -> bool:
        return isinstance(port, int) and self.start <= port <= self.end

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


def next_free_port(used: Iterable[int], port_range: PortRange) -> int:
    """Smallest port of port_range that is not in used."""
    taken = set(used)
    for port in range(port_range.start, port_range.end + 1):
        if port not in taken:
            return port
    raise RangeExhausted(port_range.kind, port_range.start, port_range.end)


class PortAllocator:
    """
    Proposes and validates ports from the two disjoint host pools.
    Collision checks against the registry happen in the fleet service.
    """

    def __init__(self, control_range: PortRange, proxy_range: PortRange):
        self.control_range = control_range
        self.proxy_range = proxy_range

    @classmethod
    def from_settings(cls, settings: Settings) -> "PortAllocator":
        return cls(
            PortRange("control", settings.CONTROL_PORT_START, settings.CONTROL_PORT_END),
            PortRange("proxy", settings.PROXY_PORT_START, settings.PROXY_PORT_END),
        )

    def next_available(self, used: Iterable[int]) -> tuple[int, int]:
        used = list(used)
        return (
            next_free_port(used, self.control_range),
            next_free_port(used, self.proxy_range),
        )

    def validate(self, control_port: int, proxy_port: int) -> None:
        if control_port not in self.control_range:
            raise ValidationError(
                f"Control port must be between {self.control_range.start} and {self.control_range.end}"
            )
        if proxy_port not in self.proxy_range:
            raise ValidationError(
                f"Proxy port must be between {self.proxy_range.start} and {self.proxy_range.end}"
            )
