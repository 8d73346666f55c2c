from pathlib import Path

from gluetun_fleet.services.container_spec import build_gateway_spec, volume_name

from conftest import make_config


def test_gateway_spec_binds_ports_to_loopback(settings):
    spec = build_gateway_spec(make_config("gluetun-4", 33003, 34003), Path("/srv/auth.toml"), settings)

    assert spec.image == "qmcgaw/gluetun"
    assert spec.name == spec.hostname == "gluetun-4"
    assert spec.ports == {
        "8000/tcp": ("127.0.0.1", 33003),
        "8888/tcp": ("127.0.0.1", 34003),
    }


def test_gateway_spec_mounts_and_privileges(settings):
    spec = build_gateway_spec(make_config("gluetun-4"), Path("/srv/auth.toml"), settings)

    assert spec.cap_add == ["NET_ADMIN"]
    assert spec.devices == ["/dev/net/tun:/dev/net/tun:rwm"]
    assert spec.restart_policy == "unless-stopped"
    assert spec.volumes["/srv/auth.toml"] == {"bind": "/gluetun/auth/config.toml", "mode": "ro"}
    assert spec.volumes["gluetun-data-gluetun-4"] == {"bind": "/gluetun", "mode": "rw"}


def test_gateway_spec_environment(settings):
    spec = build_gateway_spec(make_config(country="Netherlands"), Path("/srv/auth.toml"), settings)

    env = spec.environment
    assert env["HTTPPROXY"] == "on"
    assert env["HTTP_CONTROL_SERVER_ADDRESS"] == ":8000"
    assert env["HTTP_CONTROL_SERVER_AUTH_CONFIG_FILEPATH"] == "/gluetun/auth/config.toml"
    assert env["VPN_SERVICE_PROVIDER"] == "surfshark"
    assert env["VPN_TYPE"] == "wireguard"
    assert env["WIREGUARD_PRIVATE_KEY"] == "private-key"
    assert env["WIREGUARD_ADDRESSES"] == "10.14.0.2/16"
    assert env["SERVER_COUNTRIES"] == "Netherlands"


def test_volume_name_uses_prefix(settings):
    assert volume_name(settings, "gluetun-2") == "gluetun-data-gluetun-2"
