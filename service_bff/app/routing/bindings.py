"""
Static route table mapping gateway endpoints onto downstream services.
"""

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple
from urllib.parse import quote


@dataclass(frozen=True)
class RouteBinding:
    """One exposed endpoint and the single downstream call it maps to."""

    method: str
    path: str
    service: str
    upstream_path: str
    forward_body: bool = False
    forward_query: bool = False
    forward_user_id: bool = False
    metric: Optional[str] = None

    @property
    def name(self) -> str:
        slug = self.path.strip("/").replace("/", "_").replace("{", "").replace("}", "")
        return f"{self.method.lower()}_{slug}"

    def upstream_url(self, base_url: str, path_params: Mapping[str, str], query: str = "") -> str:
        """Build the downstream URL, escaping each path parameter."""
        escaped = {key: quote(str(value), safe="") for key, value in path_params.items()}
        url = base_url.rstrip("/") + self.upstream_path.format(**escaped)
        if self.forward_query and query:
            url = f"{url}?{query}"
        return url


def _get(path, service, upstream_path, *, query=False):
    return RouteBinding("GET", path, service, upstream_path, forward_query=query)


def _write(method, path, service, upstream_path, *, metric=None, user_id=False):
    return RouteBinding(method, path, service, upstream_path, forward_body=True,
                        forward_user_id=user_id, metric=metric)


def _delete(path, service, upstream_path):
    return RouteBinding("DELETE", path, service, upstream_path)


ROUTE_BINDINGS: Tuple[RouteBinding, ...] = (
    # org-service
    _get("/api/org/{id}", "org", "/org/{id}"),
    _write("POST", "/api/org", "org", "/org"),
    _get("/api/brand", "org", "/brand", query=True),
    _write("POST", "/api/brand", "org", "/brand"),
    _get("/api/business", "org", "/business", query=True),
    _write("POST", "/api/business", "org", "/business"),
    _get("/api/business/{id}", "org", "/business/{id}"),
    _write("PATCH", "/api/business/{id}", "org", "/business/{id}"),
    _get("/api/franchise", "org", "/franchise", query=True),
    _write("POST", "/api/franchise", "org", "/franchise"),
    _get("/api/franchise/{id}", "org", "/franchise/{id}"),
    _write("PATCH", "/api/franchise/{id}", "org", "/franchise/{id}"),

    # forms-service
    _write("POST", "/api/forms", "forms", "/forms", metric="forms.created"),
    _get("/api/forms/{id}", "forms", "/forms/{id}"),
    _write("PATCH", "/api/forms/{id}", "forms", "/forms/{id}"),
    _delete("/api/forms/{id}", "forms", "/forms/{id}"),
    _get("/api/forms/by-code/{code}", "forms", "/forms/by-code/{code}"),
    _write("POST", "/api/franchise/{id}/forms", "forms", "/franchise/{id}/forms", metric="forms.created"),

    # submissions-service
    _write("POST", "/api/submissions", "submissions", "/submissions",
           metric="submissions.created", user_id=True),
    _get("/api/submissions/by-business/{businessId}", "submissions",
         "/submissions/by-business/{businessId}", query=True),

    # discounts-service
    _get("/api/discounts/{accessKey}", "discounts", "/discounts/{accessKey}"),
    _write("POST", "/api/discounts/mark-used", "discounts", "/discounts/mark-used",
           metric="discounts.redeemed"),

    # staff-service
    _write("POST", "/api/staff", "staff", "/staff", metric="staff.created"),
    _get("/api/staff", "staff", "/staff", query=True),
    _write("PATCH", "/api/staff/{id}", "staff", "/staff/{id}"),
    _delete("/api/staff/{id}", "staff", "/staff/{id}"),
    _write("POST", "/api/staff/{id}/schedule", "staff", "/staff/{id}/schedule"),
    _get("/api/staff/{id}/schedule", "staff", "/staff/{id}/schedule"),

    _get("/api/notifications/rules", "notifications", "/rules", query=True),
    _get("/api/reports/live/{businessId}", "reporting", "/reports/live/{businessId}"),
    _get("/api/i18n/{namespace}", "translation", "/i18n/{namespace}", query=True),
    _get("/api/flags/{tenantId}", "feature-flags", "/flags/{tenantId}"),
    _get("/api/api-keys/{tenantId}", "api-program", "/api-keys/{tenantId}"),
    _get("/api/search", "search", "/search", query=True),
    _get("/api/usage/{tenantId}", "metering", "/usage/{tenantId}"),
    _get("/api/webhooks", "integration-hub", "/webhooks", query=True),
    _get("/api/schedules", "export-scheduler", "/schedules", query=True),

    # ai-ml-service
    _write("POST", "/api/ai-ml/analyze/sentiment", "ai-ml", "/analyze/sentiment", metric="ai.analyses"),
    _write("POST", "/api/ai-ml/analyze/topics", "ai-ml", "/analyze/topics", metric="ai.analyses"),
    _get("/api/ai-ml/insights/{tenantId}", "ai-ml", "/insights/{tenantId}", query=True),

    # audit-service
    _write("POST", "/api/audit/log", "audit", "/audit/log"),
    _get("/api/audit/{tenantId}", "audit", "/audit/{tenantId}", query=True),

    # tenant-isolation-service
    _get("/api/tenants/{tenantId}", "tenant-isolation", "/tenants/{tenantId}"),
    _write("POST", "/api/tenant-isolation/validate-access", "tenant-isolation", "/validate-access"),
)


def find_binding(method: str, path: str) -> Optional[RouteBinding]:
    """Look up a binding by its declared verb and path pattern."""
    for binding in ROUTE_BINDINGS:
        if binding.method == method.upper() and binding.path == path:
            return binding
    return None
