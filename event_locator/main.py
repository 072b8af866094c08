import logging.config
from contextlib import AsyncExitStack

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from event_locator.api.router import api_router
from event_locator.config import get_settings
from event_locator.crud.event import SQLAlchemyEventStore
from event_locator.database import async_session, create_db_and_tables
from event_locator.logging_config import configure_logging
from event_locator.middleware import RequestLoggingMiddleware
from event_locator.services.cache import ResolutionCache
from event_locator.services.catalog import GeoCatalog
from event_locator.services.enrichment import AddressEnrichmentService
from event_locator.services.geocoding import NominatimReverseProvider, build_geocoder, create_nominatim
from event_locator.services.notifications import EventNotifier
from event_locator.services.scheduler import DUE_CHECK_JOB_ID, ENRICHMENT_JOB_ID, LocatorScheduler
from event_locator.services.status import DueCheckService

# Configure logging
logging.config.dictConfig(configure_logging())
logger = logging.getLogger("event_locator.main")

# Get settings
settings = get_settings()

# Initialize FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    debug=settings.DEBUG,
)

# Set up CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add custom middleware
app.add_middleware(RequestLoggingMiddleware)

# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.on_event("startup")
async def on_startup():
    """Create tables, build the location services and start background jobs."""
    logger.info("Starting Event Locator API")
    await create_db_and_tables()

    stack = AsyncExitStack()
    nominatim = await stack.enter_async_context(create_nominatim(settings))

    cache = ResolutionCache(ttl=settings.CACHE_TTL_SECONDS, max_entries=settings.CACHE_MAX_ENTRIES)
    store = SQLAlchemyEventStore(async_session)
    notifier = EventNotifier(
        webhook_url=settings.NOTIFICATION_WEBHOOK_URL,
        timeout=settings.NOTIFICATION_TIMEOUT,
    )

    app.state.exit_stack = stack
    app.state.cache = cache
    app.state.event_store = store
    app.state.notifier = notifier
    app.state.catalog = GeoCatalog(cache, settings=settings)
    app.state.geocoder = build_geocoder(settings, cache=cache, nominatim=nominatim)
    app.state.enrichment = AddressEnrichmentService(
        store,
        NominatimReverseProvider(nominatim),
        delay=settings.ENRICHMENT_DELAY_SECONDS,
    )
    app.state.due_check = DueCheckService(store, notifier)

    scheduler = LocatorScheduler()
    app.state.scheduler = scheduler
    if settings.SCHEDULER_ENABLED:
        scheduler.schedule_interval(
            app.state.enrichment.run_once,
            ENRICHMENT_JOB_ID,
            seconds=settings.ENRICHMENT_INTERVAL_SECONDS,
            run_immediately=True,
        )
        scheduler.schedule_interval(
            app.state.due_check.run_once,
            DUE_CHECK_JOB_ID,
            seconds=settings.DUE_CHECK_INTERVAL_SECONDS,
        )
        scheduler.start()
    else:
        logger.info("Background jobs disabled")


@app.on_event("shutdown")
async def on_shutdown():
    """Stop background work and release provider connections."""
    logger.info("Shutting down Event Locator API")
    app.state.enrichment.stop()
    app.state.scheduler.shutdown()
    await app.state.notifier.drain()
    await app.state.exit_stack.aclose()


@app.get("/", tags=["Health"])
async def health_check():
    """Root endpoint for health checks."""
    # Pending jobs have no run time until the scheduler starts
    job = app.state.scheduler.get_job(ENRICHMENT_JOB_ID)
    next_run = getattr(job, "next_run_time", None)
    return {
        "status": "healthy",
        "message": "Event Locator API is running",
        "scheduler_running": app.state.scheduler.running,
        "next_enrichment_run": next_run.isoformat() if next_run else None,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "event_locator.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
