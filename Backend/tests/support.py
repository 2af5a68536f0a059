from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from eia_proxy.db import Base
from eia_proxy.models import GenerationRecord

sample_response = {
    "response": {
        "total": "3",
        "data": [
            {
                "period": "2024-03",
                "location": "TX",
                "stateDescription": "Texas",
                "sectorid": "99",
                "sectorDescription": "All Sectors",
                "fueltypeid": "WND",
                "fuelTypeDescription": "wind",
                "generation": "10234.56",
                "generation-units": "thousand megawatthours",
            },
            {
                "period": "2024-03",
                "location": "TX",
                "sectorDescription": "Electric Utility, Non-Cogen",
                "fueltypeid": "SUN",
                "generation": "4500",
            },
            {
                "period": "2024-02",
                "location": "TX",
                "sectorDescription": "All Sectors",
                "fueltypeid": "WND",
                "generation": None,
            },
        ],
    }
}


def make_session_factory():
    """In-memory SQLite shared by every session and thread of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False)


def seed(session_factory, rows):
    db = session_factory()
    try:
        db.add_all([GenerationRecord(**row) for row in rows])
        db.commit()
    finally:
        db.close()


def count_rows(session_factory, state_code=None):
    db = session_factory()
    try:
        q = db.query(GenerationRecord)
        if state_code is not None:
            q = q.filter(GenerationRecord.state_code == state_code)
        return q.count()
    finally:
        db.close()
