import time
import logging
from contextlib import asynccontextmanager
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from feedagg.config import Settings
from feedagg.storage.cache import CacheUnavailableError
from feedagg.tracker.pipeline import FeedPipeline
from feedagg.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

settings = Settings.from_env()
pipeline = FeedPipeline.from_settings(settings)

# Refreshes never overlap or pile up
scheduler = BackgroundScheduler(
    job_defaults={
        "coalesce": True,
        "max_instances": 1,
        "misfire_grace_time": 30,
    }
)


def refresh_fixed_feeds():
    result = pipeline.refresh()
    return {"status": "success", "items": len(result.items), "lastUpdate": result.last_update}


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level)
    scheduler.add_job(
        refresh_fixed_feeds,
        "interval",
        minutes=settings.refresh_interval_minutes,
        id="refresh_fixed_feeds",
    )
    scheduler.start()

    # Warm the fixed-feed cache right away
    try:
        refresh_fixed_feeds()
    except Exception as e:
        logger.warning("First refresh failed: %s", e)

    yield
    scheduler.shutdown(wait=False)
    pipeline.close()


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=512)


@app.get("/health")
def health():
    return {"status": "ok", "ts": int(time.time())}


@app.get("/last-update")
def last_update():
    resp = JSONResponse({"status": "success", "last_update": pipeline.last_updated})
    resp.headers["Cache-Control"] = "public, max-age=5"
    return resp


# Numeric params stay strings so bad input falls back to defaults instead of a 422
@app.get("/")
@app.get("/feeds")
def aggregated_feeds(
    feeds: Optional[str] = None,
    page: Optional[str] = None,
    page_size: Optional[str] = Query(None, alias="pageSize"),
    ttl: Optional[str] = None,
):
    try:
        result = pipeline.handle({"feeds": feeds, "page": page, "pageSize": page_size, "ttl": ttl})
    except CacheUnavailableError as e:
        raise HTTPException(503, str(e))
    return result.model_dump(by_alias=True)


@app.post("/force-update")
def force_update():
    try:
        return refresh_fixed_feeds()
    except CacheUnavailableError as e:
        raise HTTPException(503, str(e))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("feedagg.api.main:app", host="0.0.0.0", port=8000, reload=True)
