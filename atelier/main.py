import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from atelier.config import configure_logging, get_config
from atelier.routers.checkout import router as checkout_router
from atelier.routers.forms import router as forms_router
from atelier.routers.limits import limiter
from atelier.routers.site import router as site_router

configure_logging(get_config().log_level)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Atelier – Studio Site API",
    description="Routing, pricing, brief intake and checkout hand-off for the studio site.",
    version="1.0.0",
)

# Rate-limiting state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception for %s", request.url)
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred."})


app.include_router(site_router)
app.include_router(forms_router)
app.include_router(checkout_router)


@app.get("/", summary="Health check")
async def root() -> dict:
    return {"message": "Hello from Atelier"}
