"""
Dispatch routing for the gateway: the static binding table, the generic
proxy that executes a binding, and the readiness fan-out.
"""

from .bindings import ROUTE_BINDINGS, RouteBinding, find_binding
from .dispatcher import ProxyDispatcher
from .readiness import ReadinessProbe

__all__ = [
    "ROUTE_BINDINGS",
    "ProxyDispatcher",
    "ReadinessProbe",
    "RouteBinding",
    "find_binding",
]
