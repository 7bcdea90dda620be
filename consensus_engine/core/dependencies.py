"""
Route dependencies.

The orchestrator is built once in the application lifespan and stored on
`app.state`; tests override `get_orchestrator` to inject fake adapters.
"""

from fastapi import Request

from consensus_engine.config import settings
from consensus_engine.services.orchestrator import Orchestrator


def get_orchestrator(request: Request) -> Orchestrator:
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        orchestrator = Orchestrator.from_settings(settings)
        request.app.state.orchestrator = orchestrator
    return orchestrator
