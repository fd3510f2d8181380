from fastapi import APIRouter

router = APIRouter(tags=["health"])

@router.get("/health", summary="Sonde de vie")
def health():
    return {"status": "ok"}
