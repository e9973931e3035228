from fastapi import APIRouter

from app.api.v1.endpoints import analysis, document_groups, documents, remote_sets, rules, sessions

# Create API router
api_router = APIRouter()

api_router.include_router(analysis.router, prefix="/analysis", tags=["Analysis"])
api_router.include_router(rules.router, prefix="/rules", tags=["Rules"])
api_router.include_router(document_groups.router, prefix="/document-groups", tags=["Document Groups"])
api_router.include_router(documents.router, prefix="/documents", tags=["Documents"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["Sessions"])
api_router.include_router(remote_sets.router, prefix="/remote-sets", tags=["Remote Sets"])

__all__ = ["api_router"]
