from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, model_validator


class Settings(BaseSettings):
    # Host port pools, inclusive on both ends
    CONTROL_PORT_START: int = 33000
    CONTROL_PORT_END: int = 33100
    PROXY_PORT_START: int = 34000
    PROXY_PORT_END: int = 34100

    REGISTRY_FILE: Path = Field(
        default=Path("containers.json"),
        description="Registry document mapping container name to its configuration"
    )

    AUTH_FILE: Path = Field(
        default=Path("config/auth.toml"),
        description="Control server role file mounted read-only into every container"
    )

    GLUETUN_IMAGE: str = "qmcgaw/gluetun"
    CONTAINER_PREFIX: str = "gluetun"
    VOLUME_PREFIX: str = "gluetun-data"

    VPN_SERVICE_PROVIDER: str = "surfshark"
    VPN_TYPE: str = "wireguard"

    CONTROL_HOST: str = "127.0.0.1"
    CONTROL_TIMEOUT_S: float = 5.0

    RECONNECT_ATTEMPTS: int = 10
    RECONNECT_INTERVAL_S: float = 2.0

    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 3030
    CORS_ORIGINS: list[str] = ["http://localhost:3030"]

    model_config = SettingsConfigDict(
        env_file=".env"
    )

    @model_validator(mode="after")
    def validate_port_ranges(self):
        if self.CONTROL_PORT_START > self.CONTROL_PORT_END:
            raise ValueError("CONTROL_PORT_START must not exceed CONTROL_PORT_END")
        if self.PROXY_PORT_START > self.PROXY_PORT_END:
            raise ValueError("PROXY_PORT_START must not exceed PROXY_PORT_END")
        if (
            self.CONTROL_PORT_START <= self.PROXY_PORT_END
            and self.PROXY_PORT_START <= self.CONTROL_PORT_END
        ):
            raise ValueError("Control and proxy port ranges must not overlap")
        return self

    @property
    def auth_file_path(self) -> Path:
        """Absolute path of the auth file, as Docker bind mounts require."""
        return self.AUTH_FILE.expanduser().resolve()
