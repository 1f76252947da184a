# mediable/services/api/routers/health.py
from __future__ import annotations
from fastapi import APIRouter
from mediable.common.settings import get_settings
from mediable.database.models.mediable import mediable_types

router = APIRouter()


@router.get("/healthz")
def healthz():
    s = get_settings()
    return {
        "ok": True,
        "app": s.app_name,
        "env": s.app_env,
        "mediable_types": mediable_types(),
    }
