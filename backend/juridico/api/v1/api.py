"""
Main API router aggregator
"""
from fastapi import APIRouter

from juridico.api.v1.endpoints import (
    admin,
    auth,
    chat,
    directory,
    generation,
    health,
    processes,
    shares,
    suggestions,
    user,
)

api_router = APIRouter()

# Include routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(processes.router, prefix="/processes", tags=["Processes"])
api_router.include_router(shares.router, prefix="/processes", tags=["Sharing"])
api_router.include_router(generation.router, prefix="/processes", tags=["AI Generation"])
api_router.include_router(chat.router, tags=["Chat"])
api_router.include_router(suggestions.router, prefix="/suggestions", tags=["Prompt Suggestions"])
api_router.include_router(directory.router, prefix="/directory", tags=["Directory"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
api_router.include_router(user.router, prefix="/user", tags=["User"])
api_router.include_router(health.router, prefix="/health", tags=["Health"])
