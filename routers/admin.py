from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from bank import reload_bank
from config import Settings, get_settings
from db import SessionLocal
from deps.auth import require_admin

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.post("/reload")
def reload_questions(settings: Annotated[Settings, Depends(get_settings)]):
    n = reload_bank(SessionLocal, settings.questions_data_dir)
    if n == 0:
        return {
            "ok": False,
            "count": 0,
            "error": f"no valid questions found in {settings.questions_data_dir}",
        }
    return {"ok": True, "count": n}
