import pandas as pd
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import StoreError
from .models import GenerationRecord

# column -> CSV header, in output order
CSV_COLUMNS = {
    "period": "Period",
    "state_code": "State",
    "fuel_type": "Fuel Type",
    "generation_mwh": "Generation (MWh)",
}


def records_to_csv(df: pd.DataFrame) -> str:
    out = df.reindex(columns=list(CSV_COLUMNS)).rename(columns=CSV_COLUMNS)
    return out.to_csv(index=False, lineterminator="\n")


def export_csv(db: Session) -> str:
    """Every stored row, in insertion order, as CSV text with a header line."""
    stmt = select(
        GenerationRecord.period,
        GenerationRecord.state_code,
        GenerationRecord.fuel_type,
        GenerationRecord.generation_mwh,
    ).order_by(GenerationRecord.id.asc())
    try:
        df = pd.read_sql_query(stmt, db.bind)
    except SQLAlchemyError as exc:
        raise StoreError(f"Export query failed: {exc}") from exc
    return records_to_csv(df)
