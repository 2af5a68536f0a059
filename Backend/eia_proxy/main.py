import logging
logging.basicConfig(level=logging.INFO)
log = logging.getLogger("eia_proxy")

import math
from fastapi import FastAPI, Depends, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response
from sqlalchemy.orm import Session
from apscheduler.schedulers.background import BackgroundScheduler

from . import config
from .cache import GenerationCache
from .db import Base, engine, get_db, SessionLocal
from .eia_client import fetch_generation
from .errors import EnergyProxyError, ValidationError, InsufficientDataError
from .export import export_csv
from .forecast import calculate_forecast, renewable_history
from .refresh import policy_from_env
from .schemas import GenerationRow, ForecastResponse, InvalidateResult

app = FastAPI(title="EIA Generation Cache API", version="1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

generation_cache = GenerationCache(SessionLocal, fetch_generation, policy_from_env())


def get_cache() -> GenerationCache:
    return generation_cache


@app.exception_handler(EnergyProxyError)
def handle_energy_error(request: Request, exc: EnergyProxyError):
    # clients only see the status and a generic body; detail stays in the log
    log.error("%s on %s: %s", type(exc).__name__, request.url.path, exc)
    return PlainTextResponse(exc.public_message, status_code=exc.status_code)


@app.exception_handler(Exception)
def handle_unexpected_error(request: Request, exc: Exception):
    log.exception("Unhandled error on %s: %s", request.url.path, exc)
    return PlainTextResponse("Server Error", status_code=500)


def _validate_state(state: str) -> str:
    state = state.strip()
    if not state:
        raise ValidationError("state must not be empty")
    if len(state) > 16:
        raise ValidationError("state must be at most 16 characters")
    return state


@app.get("/health")
def health():
    return {"status": "ok"}

@app.get("/api/energy", response_model=list[GenerationRow])
def energy(
    state: str = Query(config.DEFAULT_STATE, description="EIA location code, e.g. TX or US-TOTAL. Surrounding whitespace is stripped; empty or longer than 16 characters is rejected with 400."),
    cache: GenerationCache = Depends(get_cache),
):
    return cache.fetch_region(_validate_state(state))

@app.get("/api/forecast", response_model=ForecastResponse)
def forecast(db: Session = Depends(get_db)):
    df = renewable_history(db)
    history = [{"period": r.period, "value": float(r.value)} for r in df.itertuples(index=False)]

    predicted = calculate_forecast(list(enumerate(p["value"] for p in history)))
    if not all(math.isfinite(p["value"]) for p in predicted):
        raise InsufficientDataError(
            f"Need at least 2 periods of renewable history to forecast (have {len(history)})."
        )

    log.info("forecast: %d history periods, %d projected", len(history), len(predicted))
    return {"history": history, "forecast": predicted}

@app.get("/api/export")
def export(db: Session = Depends(get_db)):
    body = export_csv(db)
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="report.csv"'},
    )

@app.post("/api/invalidate", response_model=InvalidateResult)
def invalidate(
    state: str = Query(..., description="EIA location code to drop from the cache. Surrounding whitespace is stripped; empty or longer than 16 characters is rejected with 400."),
    cache: GenerationCache = Depends(get_cache),
):
    state = _validate_state(state)
    return {"state": state, "deleted": cache.invalidate(state)}


def _scheduled_warm():
    for region in config.WARM_REGIONS:
        try:
            rows = generation_cache.fetch_region(region)
            log.info("Warmed %s (%d rows).", region, len(rows))
        except Exception as e:
            log.exception("Warm-up failed for %s: %s", region, e)

scheduler = BackgroundScheduler()
scheduler_started = False

@app.on_event("startup")
def startup():
    global scheduler_started
    Base.metadata.create_all(bind=engine)

    if scheduler_started or not config.WARM_REGIONS:
        return

    scheduler.add_job(
        _scheduled_warm,
        "interval",
        minutes=config.WARM_INTERVAL_MINUTES,
        id="warm_job",
        replace_existing=True,
    )
    scheduler.start()
    scheduler_started = True
    log.info("Warm-up job scheduled every %d min for %s", config.WARM_INTERVAL_MINUTES, config.WARM_REGIONS)

@app.on_event("shutdown")
def shutdown():
    global scheduler_started
    if scheduler_started:
        scheduler.shutdown(wait=False)
        scheduler_started = False


def run():
    import uvicorn
    uvicorn.run("eia_proxy.main:app", host="0.0.0.0", port=config.PORT)
