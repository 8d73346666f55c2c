import logging
from typing import Any

import httpx

from gluetun_fleet.domain.container import Credentials
from gluetun_fleet.domain.errors import UpstreamUnavailable
from gluetun_fleet.domain.ports import ControlClient

logger = logging.getLogger(__name__)

PUBLIC_IP_PATH = "/v1/publicip/ip"
VPN_SETTINGS_PATH = "/v1/vpn/settings"


class GluetunControlClient(ControlClient):
    """Talks to the HTTP control server each gluetun container exposes."""

    def __init__(
        self,
        host: str = "127.0.0.1",
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.host = host
        self.timeout = timeout
        self._transport = transport

    async def get_public_ip(self, port: int, credentials: Credentials) -> dict[str, Any]:
        response = await self._request("GET", port, PUBLIC_IP_PATH, credentials)
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamUnavailable(f"Invalid response from control port {port}: {exc}")

    async def update_countries(
        self,
        port: int,
        credentials: Credentials,
        countries: list[str],
    ) -> None:
        payload = {"provider": {"server_selection": {"countries": countries}}}
        await self._request("PUT", port, VPN_SETTINGS_PATH, credentials, json=payload)

    async def _request(
        self,
        method: str,
        port: int,
        path: str,
        credentials: Credentials,
        **kwargs,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=f"http://{self.host}:{port}",
            auth=httpx.BasicAuth(credentials.username, credentials.password),
            timeout=httpx.Timeout(self.timeout),
            transport=self._transport,
        ) as client:
            try:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
                return response
            except httpx.HTTPError as exc:
                logger.debug(f"{method} {path} on control port {port} failed: {exc}")
                raise UpstreamUnavailable(str(exc) or type(exc).__name__)
