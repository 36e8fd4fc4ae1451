from fastapi import APIRouter, Request

from agentrpg.api.v1.routes_auth import router as auth_router


api_router = APIRouter()

api_router.include_router(auth_router, tags=["auth"])


@api_router.get("/", summary="API info")
@api_router.get("", include_in_schema=False)
def api_root(request: Request):
    app = request.app
    return {
        "name": app.title,
        "version": app.version,
        "status": "online",
        "docs": app.docs_url,
    }
