"""
Adapters package for the BFF gateway.

HTTP client wrappers for the gateway's own collaborators (entitlements,
metering). Both share the service's ``httpx.AsyncClient`` and neither
lets a collaborator failure escape into the request: entitlements fall back
to the empty set and usage increments are dropped with a warning.
"""

from .entitlements_client import EntitlementsClient
from .usage_meter import UsageMeter

__all__ = [
    "EntitlementsClient",
    "UsageMeter",
]
