from fastapi import APIRouter, Depends

from gluetun_fleet.api.deps import get_container_service
from gluetun_fleet.services.container_service import ContainerService
from gluetun_fleet.schemas.container import AvailablePortsResponse

router = APIRouter(tags=["fleet"])

COUNTRIES = [
    "Albania", "Argentina", "Australia", "Austria", "Belgium",
    "Bosnia and Herzegovina", "Brazil", "Bulgaria", "Canada", "Chile",
    "Colombia", "Costa Rica", "Croatia", "Cyprus", "Czech Republic",
    "Denmark", "Egypt", "Estonia", "Finland", "France",
    "Germany", "Greece", "Hong Kong", "Hungary", "Iceland",
    "India", "Indonesia", "Ireland", "Israel", "Italy",
    "Japan", "Kazakhstan", "Latvia", "Lithuania", "Luxembourg",
    "Malaysia", "Mexico", "Moldova", "Netherlands", "New Zealand",
    "Nigeria", "North Macedonia", "Norway", "Paraguay", "Philippines",
    "Poland", "Portugal", "Romania", "Serbia", "Singapore",
    "Slovakia", "Slovenia", "South Africa", "South Korea", "Spain",
    "Sweden", "Switzerland", "Taiwan", "Thailand", "Turkey",
    "UAE", "Ukraine", "United Kingdom", "United States", "Venezuela",
    "Vietnam",
]


@router.get("/ports/available", response_model=AvailablePortsResponse)
async def available_ports(service: ContainerService = Depends(get_container_service)):
    control_port, proxy_port = await service.available_ports()
    return {"controlPort": control_port, "proxyPort": proxy_port}


@router.get("/countries", response_model=list[str])
async def list_countries():
    return COUNTRIES
