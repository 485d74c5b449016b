# routers/generations.py

from fastapi import APIRouter, Depends, HTTPException

from db import SessionLocal
from deps.auth import require_client
from models import Generation
from schemas.generations import GenerationOut

router = APIRouter(
    prefix="/generations", tags=["generations"], dependencies=[Depends(require_client)]
)


@router.get("/recent-list")
def generations_recent(limit: int = 20):
    limit = max(1, min(limit, 100))

    with SessionLocal() as db:
        items = (
            db.query(Generation)
            .order_by(Generation.created_at.desc(), Generation.id.desc())
            .limit(limit)
            .all()
        )

    # question id lists can be long; keep them for the detail view
    rows = [GenerationOut.model_validate(g).model_dump(exclude={"question_ids"}) for g in items]
    return {"ok": True, "items": rows, "count": len(rows)}


@router.get("/{generation_id}", response_model=GenerationOut)
def get_generation(generation_id: int):
    with SessionLocal() as db:
        g = db.get(Generation, generation_id)
        if not g:
            raise HTTPException(status_code=404, detail="Generation not found")
        return GenerationOut.model_validate(g)
