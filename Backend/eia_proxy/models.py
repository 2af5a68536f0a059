from sqlalchemy import Column, Integer, String, Float, DateTime, Index
from .db import Base

class GenerationRecord(Base):
    __tablename__ = "energy_data"

    id = Column(Integer, primary_key=True, index=True)
    state_code = Column(String(16), index=True)
    period = Column(String(16), index=True)       # YYYY-MM
    sector = Column(String(255))
    fuel_type = Column(String(16), index=True)    # WND, SUN, ...
    generation_mwh = Column(Float, nullable=True)
    fetched_at = Column(DateTime(timezone=True), nullable=True)

    # no unique constraint on (state_code, period, sector, fuel_type)
    __table_args__ = (
        Index("ix_energy_data_lookup", "state_code", "period"),
    )

    def to_dict(self) -> dict:
        return {
            "state_code": self.state_code,
            "period": self.period,
            "sector": self.sector,
            "fuel_type": self.fuel_type,
            "generation_mwh": self.generation_mwh,
        }
