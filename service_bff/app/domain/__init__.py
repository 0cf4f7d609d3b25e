"""
Domain utilities for the gateway.

Holds the entitlement model and route-group gates. The admission pipeline
middleware lives in ``domain.pipeline`` and is imported from there directly,
since it depends on the adapters that themselves use this package.
"""

from .entitlements import DEFAULT_GATES, EntitlementSet, GateEvaluator, RouteGate

__all__ = [
    "DEFAULT_GATES",
    "EntitlementSet",
    "GateEvaluator",
    "RouteGate",
]
