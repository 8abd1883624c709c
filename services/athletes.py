from uuid import UUID

from sqlalchemy.orm import Session

from core.exceptions import NotFoundError
from models import Athlete


def get_athlete(db: Session, athlete_id: UUID) -> Athlete:
    athlete = db.query(Athlete).filter(Athlete.id == athlete_id).first()
    if athlete is None:
        raise NotFoundError("Athlete", str(athlete_id))
    return athlete
