"""Request-scoped access to the collaborators stored on app.state."""

from fastapi import Request

from fizzcaps.claims.orchestrator import ClaimOrchestrator


def get_orchestrator(request: Request) -> ClaimOrchestrator:
    return request.app.state.orchestrator
