from datetime import timedelta

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from resort.config import settings
from resort.database import get_db
from resort.visits.schemas import VisitHitResponse, VisitStats
from resort.visits.service import DEFAULT_KEY, VisitService

router = APIRouter()

def client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"

@router.post("/hit", response_model=VisitHitResponse)
def hit_visit(
    request: Request,
    response: Response,
    key: str = Query(DEFAULT_KEY, min_length=1, max_length=100),
    db: Session = Depends(get_db)
):
    """Count a visit for ``key`` unless this visitor was counted in the last window"""
    window = timedelta(hours=settings.VISIT_DEDUP_HOURS)
    visit_service = VisitService(db, dedup_window=window)
    result = visit_service.hit(key, client_address(request), request.headers.get("user-agent"))

    if result.counted:
        response.set_cookie(
            f"visited_{key}", "true",
            max_age=int(window.total_seconds()),
            httponly=True
        )
    return result

@router.get("/stats", response_model=VisitStats)
def get_visits(db: Session = Depends(get_db)):
    """Visit totals per key and overall unique visitors"""
    return VisitService(db).stats()
