import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from career_helper.api.v1.health import router as health_router
from career_helper.api.v1.resumes import router as resumes_router
from career_helper.api.v1.analyses import router as analyses_router
from career_helper.api.v1.candidates import router as candidates_router
from career_helper.core.cors import cors_allowed_origins
from career_helper.core.rate_limit import limiter
from career_helper.core.config import settings
from career_helper.core.lifespan import lifespan

logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s %(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

app = FastAPI(title="Career Helper API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allowed_origins(),
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(resumes_router, prefix="/v1", tags=["Resumes"])
app.include_router(analyses_router, prefix="/v1", tags=["Analyses"])
app.include_router(candidates_router, prefix="/v1", tags=["Candidates"])
