from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request) -> dict:
    snapshot = request.app.state.catalog.snapshot()
    return {"status": "ok", "catalog_version": snapshot.version, "cards": len(snapshot)}
