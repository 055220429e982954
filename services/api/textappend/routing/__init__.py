"""Public routing control plane."""

from .control import (
    ApiGatewayRoutingControlPlane,
    FileRoutingControlPlane,
    InMemoryRoutingControlPlane,
    RoutingControlPlane,
)

__all__ = [
    "ApiGatewayRoutingControlPlane",
    "FileRoutingControlPlane",
    "InMemoryRoutingControlPlane",
    "RoutingControlPlane",
]
