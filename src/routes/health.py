"""
Health check endpoints
"""
from fastapi import APIRouter, Depends

from src.database.connection import get_repository
from src.database.repository import Repository

router = APIRouter()


@router.get("/healthz")
async def healthcheck(repository: Repository = Depends(get_repository)):
    """Health check endpoint"""
    return {"status": "ok", "storage": repository.name}
