import sys
import logging
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from slowapi.errors import RateLimitExceeded
from chartadvisor.api.routes import router
from chartadvisor.api.metrics import router as metrics_router
from chartadvisor.core.config import Settings, get_settings
from chartadvisor.core.logging import configure_logging
from chartadvisor.core.middleware import CorrelationIDMiddleware, TimeoutMiddleware
from chartadvisor.core.rate_limit import limiter, rate_limit_handler

load_dotenv()

try:
    settings = get_settings()
except Exception as e:
    logging.basicConfig(level=logging.ERROR)
    logging.getLogger(__name__).error(f"Invalid configuration, refusing to start: {e}")
    sys.exit(1)

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


def install_middleware(app: FastAPI, settings: Settings) -> None:
    # Starlette runs the last added middleware outermost
    app.add_middleware(CorrelationIDMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization", "X-Correlation-ID"],
        expose_headers=["X-Correlation-ID", "X-Response-Time"]
    )
    app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)


app = FastAPI(
    title="Chart Advisor API",
    description="Chart recommendations and encoding validation for insight builders",
    version="1.0.0"
)
app.state.limiter = limiter
app.state.settings = settings
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

install_middleware(app, settings)

for api_router in (router, metrics_router):
    app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    return {"message": "Chart Advisor API is running"}


logger.info(
    "Chart Advisor API ready",
    extra={"allowed_origins": settings.allowed_origins_list, "timeout": settings.request_timeout_seconds}
)
