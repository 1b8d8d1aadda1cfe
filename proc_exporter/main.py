import asyncio
from contextlib import asynccontextmanager
from typing import Iterable, Optional

from fastapi import FastAPI

from .config import Settings, settings
from .logger import logger
from .metrics import MetricsReporter, MetricStore, MetricsUpdater
from .routers import metrics as metrics_router
from .system import ProcessResolver, ProcessSampler


def create_app(
    process_names: Iterable[str],
    app_settings: Optional[Settings] = None,
    resolver: Optional[ProcessResolver] = None,
    sampler: Optional[ProcessSampler] = None,
) -> FastAPI:
    """Build the exporter application for a fixed list of process names.

    The store, updater and reporter are created here and hung on ``app.state``;
    the lifespan only starts and stops the two loops.
    """
    app_settings = app_settings or settings
    process_names = list(process_names)
    if not process_names:
        raise ValueError("At least one process name is required")

    # Guards a whole update pass and a whole report pass; the endpoint never takes it
    lock = asyncio.Lock()
    store = MetricStore(
        process_names, runtime_collectors=app_settings.runtime_collectors
    )
    updater = MetricsUpdater(
        process_names,
        store,
        lock,
        resolver=resolver,
        sampler=sampler or ProcessSampler(app_settings.cpu_sample_interval),
        interval=app_settings.interval,
        abort_on_sample_error=app_settings.abort_on_sample_error,
    )
    reporter = MetricsReporter(
        store,
        lock,
        interval=app_settings.interval,
        internal_prefixes=app_settings.internal_prefixes,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting up, monitoring processes: {updater.process_names}")
        await updater.start()
        if app_settings.report_enabled:
            await reporter.start()
        logger.info("Startup complete.")
        yield
        await reporter.stop()
        await updater.stop()

    app = FastAPI(lifespan=lifespan, title="Process Exporter")
    app.state.settings = app_settings
    app.state.store = store
    app.state.updater = updater
    app.state.reporter = reporter
    app.add_api_route(
        app_settings.metrics_path,
        metrics_router.get_metrics,
        methods=["GET"],
        tags=["metrics"],
    )
    app.include_router(metrics_router.router)
    return app
