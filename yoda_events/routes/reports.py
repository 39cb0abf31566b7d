# yoda_events/routes/reports.py
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from yoda_events.database import get_db
from yoda_events.utils.reporting import EventReportManager

router = APIRouter(prefix="/events/report", tags=["Reports"])


# Events touched within the last RECENTLY_UPDATED_HOURS, as CSV
@router.get("/recentlyUpdated.csv")
def recently_updated_events(db: Session = Depends(get_db)):
    content = EventReportManager(db).get_recently_updated_report()
    return Response(content=content, media_type="text/csv")
