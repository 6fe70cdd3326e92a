from fastapi import APIRouter

from candidate_sync.api.routes import health, roster, selection

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(selection.router, prefix="/selection", tags=["selection"])
api_router.include_router(roster.router, prefix="/roster", tags=["roster"])
