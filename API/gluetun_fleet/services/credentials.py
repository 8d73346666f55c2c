import logging
import secrets
import string
import tomllib
from pathlib import Path

import aiofiles
import aiofiles.os

from gluetun_fleet.domain.container import Credentials
from gluetun_fleet.domain.errors import FleetRuntimeError
from gluetun_fleet.domain.ports import CredentialProvider

logger = logging.getLogger(__name__)

ROLE_NAME = "gluetun-manager"

# Control server routes the manager needs
ROLE_ROUTES = [
    "GET /v1/vpn/status",
    "PUT /v1/vpn/status",
    "GET /v1/vpn/settings",
    "PUT /v1/vpn/settings",
    "GET /v1/openvpn/status",
    "PUT /v1/openvpn/status",
    "GET /v1/openvpn/settings",
    "GET /v1/openvpn/portforwarded",
    "GET /v1/publicip/ip",
]

_PASSWORD_ALPHABET = string.ascii_letters + string.digits


def generate_username() -> str:
    return f"gluetun-user-{secrets.token_hex(4)}"


def generate_password(length: int = 32) -> str:
    return "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))


def render_auth_toml(credentials: Credentials) -> str:
    routes = "".join(f'  "{route}",\n' for route in ROLE_ROUTES)
    return (
        "[[roles]]\n"
        f'name = "{ROLE_NAME}"\n'
        f"routes = [\n{routes}]\n"
        'auth = "basic"\n'
        f'username = "{credentials.username}"\n'
        f'password = "{credentials.password}"\n'
    )


def parse_auth_toml(content: str) -> Credentials | None:
    """Pull the basic-auth credentials out of a role file, if it has any."""
    try:
        document = tomllib.loads(content)
    except tomllib.TOMLDecodeError:
        return None

    for role in document.get("roles", []):
        username = role.get("username")
        password = role.get("password")
        if username and password:
            return Credentials(username=username, password=password)
    return None


class FileCredentialProvider(CredentialProvider):
    """
    Owns the control server auth file shared (read-only) by every container.
    The file is generated once with random credentials and reused afterwards.
    """

    def __init__(self, auth_file: Path):
        self.auth_file = Path(auth_file).expanduser().resolve()

    async def ensure_auth_file(self) -> Path:
        if await self._read() is not None:
            return self.auth_file

        credentials = Credentials(username=generate_username(), password=generate_password())
        await aiofiles.os.makedirs(self.auth_file.parent, exist_ok=True)
        tmp_path = self.auth_file.with_name(self.auth_file.name + ".tmp")
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(render_auth_toml(credentials))
        await aiofiles.os.replace(tmp_path, self.auth_file)

        logger.info(f"Generated control server auth file {self.auth_file} for user {credentials.username}")
        return self.auth_file

    async def get_credentials(self) -> Credentials:
        await self.ensure_auth_file()
        credentials = await self._read()
        if credentials is None:
            raise FleetRuntimeError(f"Failed to read auth config from {self.auth_file}")
        return credentials

    async def _read(self) -> Credentials | None:
        try:
            async with aiofiles.open(self.auth_file, "r", encoding="utf-8") as f:
                return parse_auth_toml(await f.read())
        except FileNotFoundError:
            return None
