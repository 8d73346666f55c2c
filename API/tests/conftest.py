import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock

from gluetun_fleet.core.config import Settings
from gluetun_fleet.domain.container import ContainerConfig, Credentials, LiveContainer
from gluetun_fleet.repositories.container_registry import JSONContainerRegistry
from gluetun_fleet.services.container_service import ContainerService
from gluetun_fleet.services.country_change import ReconnectVerifier


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        REGISTRY_FILE=tmp_path / "containers.json",
        AUTH_FILE=tmp_path / "config" / "auth.toml",
    )


@pytest.fixture
def registry(settings):
    return JSONContainerRegistry(settings.REGISTRY_FILE)


@pytest.fixture
def runtime():
    runtime = AsyncMock()
    runtime.list_containers = AsyncMock(return_value=[])
    runtime.find = AsyncMock(return_value=None)
    runtime.create = AsyncMock(return_value="docker-id-123")
    return runtime


@pytest.fixture
def credentials(tmp_path):
    credentials = AsyncMock()
    credentials.ensure_auth_file = AsyncMock(return_value=tmp_path / "config" / "auth.toml")
    credentials.get_credentials = AsyncMock(return_value=Credentials("user", "secret"))
    return credentials


@pytest.fixture
def control_client():
    return AsyncMock()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def verifier(sleeps):
    async def fake_sleep(seconds):
        sleeps.append(seconds)

    return ReconnectVerifier(attempts=10, interval=2.0, sleep=fake_sleep)


@pytest.fixture
def service(registry, runtime, credentials, control_client, settings, verifier):
    return ContainerService(registry, runtime, credentials, control_client, settings, verifier)


def make_config(name="gluetun-1", control_port=33000, proxy_port=34000, country="Germany"):
    return ContainerConfig(
        name=name,
        control_port=control_port,
        proxy_port=proxy_port,
        country=country,
        private_key="private-key",
        address="10.14.0.2/16",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def make_live(name="gluetun-1", state="running", docker_id=None):
    return LiveContainer(
        name=name,
        id=docker_id or f"id-{name}",
        state=state,
        status="Up 2 hours" if state == "running" else "Exited (0) 1 minute ago",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
