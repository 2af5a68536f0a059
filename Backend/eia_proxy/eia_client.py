import logging
import requests

from .config import EIA_API_URL, EIA_API_KEY, EIA_TIMEOUT_SECONDS, UPSTREAM_PAGE_SIZE
from .errors import UpstreamError

log = logging.getLogger(__name__)


def _to_float(value):
    # EIA sends numbers as strings; missing stays None, not 0
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise UpstreamError(f"Unparsable generation value: {value!r}") from exc


def normalize_record(item: dict) -> dict:
    """Map one EIA row onto the energy_data column names."""
    if not isinstance(item, dict) or not item.get("period"):
        raise UpstreamError(f"Malformed EIA record: {item!r}")
    return {
        "state_code": item.get("location"),
        "period": item["period"],
        "sector": item.get("sectorDescription"),
        "fuel_type": item.get("fueltypeid"),
        "generation_mwh": _to_float(item.get("generation")),
    }


def fetch_generation(region: str, length: int = UPSTREAM_PAGE_SIZE) -> list[dict]:
    """
    EIA v2 electric-power-operational-data, newest month first:
    ?frequency=monthly&data[0]=generation&facets[location][]={region}
    """
    params = {
        "api_key": EIA_API_KEY,
        "frequency": "monthly",
        "data[0]": "generation",
        "facets[location][]": region,
        "sort[0][column]": "period",
        "sort[0][direction]": "desc",
        "offset": 0,
        "length": length,
    }
    try:
        r = requests.get(EIA_API_URL, params=params, timeout=EIA_TIMEOUT_SECONDS)
        r.raise_for_status()
        payload = r.json()
    except requests.RequestException as exc:
        raise UpstreamError(f"EIA request failed for {region}: {exc}") from exc
    except ValueError as exc:
        raise UpstreamError(f"EIA returned non-JSON body for {region}") from exc

    try:
        rows = payload["response"]["data"]
    except (KeyError, TypeError) as exc:
        raise UpstreamError(f"Unexpected EIA payload shape for {region}") from exc
    if not isinstance(rows, list):
        raise UpstreamError(f"Unexpected EIA payload shape for {region}")

    log.info("EIA returned %d rows for %s", len(rows), region)
    return [normalize_record(item) for item in rows]
