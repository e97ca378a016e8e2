# civitasfix/routers/stats.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import stats
from ..db import get_db
from ..deps import get_current_user
from ..models import User

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/summary")
def get_summary(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"success": True, "summary": stats.summary(db, current_user)}


@router.get("/weekly")
def get_weekly(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"success": True, "stats": stats.breakdown(db, current_user)}
