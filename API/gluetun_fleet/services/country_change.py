import asyncio
import logging
from typing import Any, Awaitable, Callable

from gluetun_fleet.domain.container import CountryChangeResult
from gluetun_fleet.domain.errors import FleetError

logger = logging.getLogger(__name__)

StatusFetcher = Callable[[], Awaitable[dict[str, Any]]]
Sleeper = Callable[[float], Awaitable[Any]]


class ReconnectVerifier:
    """
    Bounded polling loop confirming a VPN container picked up a new exit node.

    Each attempt sleeps `interval` seconds, then fetches the status. The loop
    ends early on the first status whose public IP differs from the IP seen
    before the change. If no attempt confirms it, one last status is fetched
    and returned unconfirmed; the loop never raises for a bad poll.
    """

    def __init__(
        self,
        attempts: int = 10,
        interval: float = 2.0,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.attempts = attempts
        self.interval = interval
        self._sleep = sleep

    async def verify(self, fetch_status: StatusFetcher, old_ip: str | None) -> CountryChangeResult:
        for attempt in range(1, self.attempts + 1):
            await self._sleep(self.interval)

            try:
                status = await fetch_status()
            except FleetError as exc:
                logger.debug(f"Status poll {attempt}/{self.attempts} failed: {exc}")
                continue

            new_ip = status.get("public_ip")
            if new_ip and new_ip != old_ip:
                # Without a baseline IP the change cannot be proven
                confirmed = old_ip is not None
                logger.info(f"VPN reconnected after {attempt} poll(s). New IP: {new_ip}")
                return CountryChangeResult(status=status, confirmed=confirmed, attempts=attempt)

        logger.info("VPN reconnection taking longer than expected, but change was submitted")
        try:
            status = await fetch_status()
        except FleetError as exc:
            status = {"error": "Unable to fetch status", "message": exc.message}
        return CountryChangeResult(status=status, confirmed=False, attempts=self.attempts)
