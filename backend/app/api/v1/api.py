from fastapi import APIRouter

from app.api.v1.endpoints import auth, contracts, documents, storage

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(contracts.router, prefix="/contracts", tags=["contracts"])
api_router.include_router(documents.router, prefix="/documents", tags=["documents"])
api_router.include_router(storage.router, prefix="/storage", tags=["storage"])
