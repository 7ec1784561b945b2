from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from srs_scheduler.db.session import SessionLocal
from srs_scheduler.services.scheduling import ScheduleService


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_schedule_service(db: Session = Depends(get_db)) -> ScheduleService:
    return ScheduleService(db)
