from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

class VisitHitResponse(BaseModel):
    ok: bool = True
    counted: bool
    count: Optional[int] = None

class VisitCounterDetail(BaseModel):
    key: str
    count: int
    last_updated: Optional[datetime] = None

class VisitStats(BaseModel):
    ok: bool = True
    total_visits: int
    unique_visitors: int
    details: List[VisitCounterDetail]
