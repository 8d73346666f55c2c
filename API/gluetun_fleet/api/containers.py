from fastapi import APIRouter, Depends

from gluetun_fleet.api.deps import get_container_service
from gluetun_fleet.services.container_service import ContainerService
from gluetun_fleet.schemas.container import (
    ActionResponse,
    ContainerCreatedResponse,
    ContainerCreateRequest,
    ContainerResponse,
    CountryChangeRequest,
    CountryChangeResponse,
    NextNameResponse,
)


router = APIRouter(prefix="/containers", tags=["containers"])


@router.get("", response_model=list[ContainerResponse])
async def list_containers(service: ContainerService = Depends(get_container_service)):
    return await service.list_containers()


# Declared before /{name} so "name" is not taken for a container name
@router.get("/name/next", response_model=NextNameResponse)
async def next_container_name(service: ContainerService = Depends(get_container_service)):
    return {"name": await service.next_container_name()}


@router.get("/{name}")
async def get_container_status(
    name: str,
    service: ContainerService = Depends(get_container_service),
):
    return await service.get_status(name)


@router.post("", response_model=ContainerCreatedResponse)
async def create_container(
    payload: ContainerCreateRequest,
    service: ContainerService = Depends(get_container_service),
):
    result = await service.create_container(
        name=payload.name,
        private_key=payload.private_key,
        address=payload.address,
        country=payload.country,
        control_port=payload.control_port,
        proxy_port=payload.proxy_port,
    )
    return {"success": True, "message": f"Container {payload.name} created and started", **result}


@router.post("/{name}/start", response_model=ActionResponse)
async def start_container(name: str, service: ContainerService = Depends(get_container_service)):
    await service.start_container(name)
    return {"success": True, "message": f"Container {name} started"}


@router.post("/{name}/stop", response_model=ActionResponse)
async def stop_container(name: str, service: ContainerService = Depends(get_container_service)):
    await service.stop_container(name)
    return {"success": True, "message": f"Container {name} stopped"}


@router.delete("/{name}", response_model=ActionResponse)
async def delete_container(name: str, service: ContainerService = Depends(get_container_service)):
    await service.delete_container(name)
    return {"success": True, "message": f"Container {name} deleted"}


@router.post("/{name}/country", response_model=CountryChangeResponse)
async def change_country(
    name: str,
    payload: CountryChangeRequest,
    service: ContainerService = Depends(get_container_service),
):
    result = await service.change_country(name, payload.country)
    message = f"Changed {name} to {payload.country}"
    if not result.confirmed:
        message += " (reconnection not confirmed yet)"
    return {
        "success": True,
        "message": message,
        "status": result.status,
        "confirmed": result.confirmed,
    }
