"""
Entitlement sets and the route-group gates evaluated against them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from shared.errors import AuthorizationError


def _freeze_flags(raw: Any) -> Mapping[str, Any]:
    if not isinstance(raw, dict):
        return MappingProxyType({})
    return MappingProxyType({str(key): value for key, value in raw.items()})


@dataclass(frozen=True)
class EntitlementSet:
    """Per-tenant module and feature switches.

    A key only disables something when it is explicitly ``False``; missing
    keys and any other value leave the module or feature enabled.
    """

    modules: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    features: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def empty(cls) -> "EntitlementSet":
        return cls()

    @classmethod
    def from_payload(cls, payload: Any) -> "EntitlementSet":
        if not isinstance(payload, dict):
            return cls.empty()
        return cls(
            modules=_freeze_flags(payload.get("modules")),
            features=_freeze_flags(payload.get("features")),
        )

    def module_enabled(self, key: str) -> bool:
        return self.modules.get(key) is not False

    def feature_enabled(self, key: str) -> bool:
        return self.features.get(key) is not False

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {"modules": dict(self.modules), "features": dict(self.features)}


@dataclass(frozen=True)
class RouteGate:
    """Entitlement predicate bound to a route-group prefix."""

    prefix: str
    kind: str  # "module" or "feature"
    key: str

    def matches(self, path: str) -> bool:
        return path == self.prefix or path.startswith(self.prefix.rstrip("/") + "/")

    def check(self, entitlements: EntitlementSet) -> None:
        if self.kind == "module":
            if not entitlements.module_enabled(self.key):
                raise AuthorizationError(f"Module disabled: {self.key}", details={"module": self.key})
        elif not entitlements.feature_enabled(self.key):
            raise AuthorizationError(f"Feature disabled: {self.key}", details={"feature": self.key})


def module_enabled(prefix: str, key: str) -> RouteGate:
    return RouteGate(prefix=prefix, kind="module", key=key)


def feature_enabled(prefix: str, key: str) -> RouteGate:
    return RouteGate(prefix=prefix, kind="feature", key=key)


DEFAULT_GATES: Sequence[RouteGate] = (
    module_enabled("/api/forms", "forms"),
    module_enabled("/api/submissions", "submissions"),
    module_enabled("/api/discounts", "discounts"),
    module_enabled("/api/staff", "staff"),
    feature_enabled("/api/reports", "reports"),
    feature_enabled("/api/i18n", "i18n"),
    feature_enabled("/api/webhooks", "integrationHub"),
    feature_enabled("/api/schedules", "exportScheduler"),
)


class GateEvaluator:
    """Runs every gate whose prefix covers the request path."""

    def __init__(self, gates: Optional[Iterable[RouteGate]] = None):
        self.gates = tuple(DEFAULT_GATES if gates is None else gates)

    def gates_for(self, path: str) -> Sequence[RouteGate]:
        return [gate for gate in self.gates if gate.matches(path)]

    def check(self, path: str, entitlements: EntitlementSet) -> None:
        """Raise AuthorizationError for the first gate that denies."""
        for gate in self.gates_for(path):
            gate.check(entitlements)
