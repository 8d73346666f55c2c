class FleetError(Exception):
    """Base class for every error surfaced by the fleet manager."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FleetError):
    status_code = 400


class PortInUse(FleetError):
    def __init__(self, port: int, kind: str = "Port"):
        super().__init__(f"{kind} {port} is already in use")
        self.port = port


class NotFound(FleetError):
    status_code = 404

    def __init__(self, name: str, detail: str | None = None):
        super().__init__(detail or f"Container {name} not found")
        self.name = name


class AlreadyInState(FleetError):
    status_code = 409

    def __init__(self, name: str, state: str):
        super().__init__(f"Container {name} is already {state}")
        self.name = name
        self.state = state


class RangeExhausted(FleetError):
    status_code = 500

    def __init__(self, kind: str, start: int, end: int):
        super().__init__(f"No available {kind} ports in range {start}-{end}")
        self.kind = kind


class FleetRuntimeError(FleetError):
    """A container or volume operation failed in the container runtime."""


class RegistryError(FleetError):
    """The registry document exists but cannot be read back."""


class UpstreamUnavailable(FleetError):
    """A managed container's control API could not be reached."""

    status_code = 502
