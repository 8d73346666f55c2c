from fastapi import Request

from gluetun_fleet.services.container_service import ContainerService


def get_container_service(request: Request) -> ContainerService:
    return request.app.state.container_service
