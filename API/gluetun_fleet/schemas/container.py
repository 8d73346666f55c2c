from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Any, Optional

# Docker's own container name rule
CONTAINER_NAME_PATTERN = r"^[a-zA-Z0-9][a-zA-Z0-9_.-]+$"


class ContainerCreateRequest(BaseModel):
    name: str = Field(..., min_length=2, pattern=CONTAINER_NAME_PATTERN)
    private_key: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("privateKey", "credentialMaterial", "private_key"),
        description="WireGuard private key",
    )
    address: str = Field(..., min_length=1, description="WireGuard interface address, e.g. 10.14.0.2/16")
    country: str = Field(..., min_length=1)
    control_port: int = Field(..., validation_alias=AliasChoices("controlPort", "control_port"))
    proxy_port: int = Field(..., validation_alias=AliasChoices("proxyPort", "proxy_port"))


class CountryChangeRequest(BaseModel):
    country: str = Field(..., min_length=1)


class ContainerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    name: str
    id: str
    state: str
    status: str
    created: Optional[datetime] = None
    control_port: Optional[int] = Field(None, serialization_alias="controlPort")
    proxy_port: Optional[int] = Field(None, serialization_alias="proxyPort")
    country: Optional[str] = None


class ContainerCreatedResponse(BaseModel):
    success: bool = True
    message: str
    id: str
    name: str
    controlPort: int
    proxyPort: int


class ActionResponse(BaseModel):
    success: bool = True
    message: str


class CountryChangeResponse(ActionResponse):
    status: dict[str, Any]
    confirmed: bool


class NextNameResponse(BaseModel):
    name: str


class AvailablePortsResponse(BaseModel):
    controlPort: int
    proxyPort: int
