# ishanya/routers/health.py
from fastapi import APIRouter
from datetime import datetime, timezone

router = APIRouter()

@router.get("/health")
def health():
    return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}
