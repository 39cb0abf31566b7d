# yoda_events/utils/reporting.py
import logging
from typing import Optional

import pandas as pd
from sqlalchemy.orm import Session

from yoda_events.repositories import EventRepository

logger = logging.getLogger(__name__)

REPORT_COLUMNS = ["id", "name", "time"]
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class EventReportManager:
    def __init__(self, db: Session):
        self.db = db

    def get_recently_updated_frame(self, hours: Optional[int] = None) -> pd.DataFrame:
        events = EventRepository(self.db).get_recently_updated_events(hours)
        df = pd.DataFrame([(e.id, e.name, e.time) for e in events], columns=REPORT_COLUMNS)
        df["time"] = pd.to_datetime(df["time"]).dt.strftime(TIME_FORMAT)
        return df

    def get_recently_updated_report(self, hours: Optional[int] = None) -> str:
        """CSV body without header: one ``id,name,time`` line per event.

        Fields containing commas or quotes are quoted the standard CSV way.
        """
        df = self.get_recently_updated_frame(hours)
        logger.info("Recently updated events report: %d rows", len(df))
        if df.empty:
            return ""
        return df.to_csv(index=False, header=False, lineterminator="\n").rstrip("\n")
