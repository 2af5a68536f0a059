from typing import Sequence, Tuple

import numpy as np
import pandas as pd
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import FORECAST_HORIZON, RENEWABLE_FUEL_TYPES
from .errors import StoreError
from .models import GenerationRecord


def renewable_history(db: Session, fuel_types: Sequence[str] = RENEWABLE_FUEL_TYPES) -> pd.DataFrame:
    """
    Wind + solar generation summed over all regions, one row per period,
    oldest first. Columns: period, value (float). Periods with no numeric
    value at all are dropped.
    """
    stmt = (
        select(
            GenerationRecord.period,
            func.sum(GenerationRecord.generation_mwh).label("value"),
        )
        .where(GenerationRecord.fuel_type.in_(list(fuel_types)))
        .group_by(GenerationRecord.period)
        .order_by(GenerationRecord.period.asc())
    )
    try:
        df = pd.read_sql_query(stmt, db.bind)
    except SQLAlchemyError as exc:
        raise StoreError(f"Renewable history query failed: {exc}") from exc

    # PostgreSQL SUM may come back as Decimal or text depending on the column type
    df["value"] = pd.to_numeric(df["value"], errors="coerce").astype(float)
    return df.dropna(subset=["value"]).reset_index(drop=True)


def calculate_forecast(history: Sequence[Tuple[int, float]], horizon: int = FORECAST_HORIZON) -> list[dict]:
    """
    Ordinary least-squares line through (index, value) pairs, projected
    ``horizon`` steps past the last index.

    history: [(0, v0), (1, v1), ...] in chronological order.

    With a single point the slope is 0/0 and every projected value is NaN.
    That is returned as-is; callers decide what to do with it.
    """
    n = len(history)
    if n == 0:
        return []

    x = np.array([i for i, _ in history], dtype=float)
    y = np.array([v for _, v in history], dtype=float)

    sum_x = x.sum()
    sum_y = y.sum()
    sum_xy = (x * y).sum()
    sum_xx = (x * x).sum()

    with np.errstate(divide="ignore", invalid="ignore"):
        slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)
        intercept = (sum_y - slope * sum_x) / n

    return [
        {"period": f"Forecast {k}", "value": float(slope * (n + k - 1) + intercept)}
        for k in range(1, horizon + 1)
    ]
