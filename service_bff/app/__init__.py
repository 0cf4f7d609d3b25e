"""
Backend-for-frontend gateway package.

The gateway fronts client requests, enforcing:
- Identity: HS256 bearer tokens verified locally
- Entitlements: per-tenant module and feature gates, failing open
- Admission: one shared capacity ceiling, refilled on a fixed period

Structure:
- app.main: FastAPI app, routes, and middleware wiring.
- app.adapters: HTTP clients for the entitlements and metering services.
- app.auth: Bearer-token verification and the authenticated principal.
- app.domain: Entitlement gates and the admission pipeline.
- app.ratelimit: The shared admission controller.
- app.routing: Route table, proxy dispatcher and readiness fan-out.
"""
