from typing import Optional
from pydantic import BaseModel

class GenerationRow(BaseModel):
    state_code: Optional[str] = None
    period: str
    sector: Optional[str] = None
    fuel_type: Optional[str] = None
    generation_mwh: Optional[float] = None

class SeriesPoint(BaseModel):
    period: str
    value: float

class ForecastResponse(BaseModel):
    history: list[SeriesPoint]
    forecast: list[SeriesPoint]

class InvalidateResult(BaseModel):
    state: str
    deleted: int
