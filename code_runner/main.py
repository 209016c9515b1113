import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from code_runner.api.routes import run_program
from code_runner.core.config import Settings, get_settings
from code_runner.core.logging import setup_logging
from code_runner.services.classifier import malformed_body
from code_runner.services.rate_limiter import RATE_LIMITED, SlidingWindowRateLimiter
from code_runner.services.runner import ProgramRunner

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}


def create_app(settings: Settings = None, logger: logging.Logger = None) -> FastAPI:
    """Build one worker's application with its own pipeline and rate limiter."""
    settings = settings or get_settings()
    logger = logger or setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        description="Compile and run programs via HTTP API"
    )
    app.state.settings = settings
    app.state.logger = logger
    app.state.rate_limiter = SlidingWindowRateLimiter(
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )
    app.state.runner = ProgramRunner(settings, logger.getChild("runner"))

    app.add_middleware(GZipMiddleware)
    app.add_middleware(
        CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"]
    )

    @app.middleware("http")
    async def admission_control(request: Request, call_next):
        """Reject clients over their request budget before anything else runs."""
        client = request.client.host if request.client else "unknown"
        if not app.state.rate_limiter.admit(client):
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"detail": RATE_LIMITED},
            )
        return await call_next(request)

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError):
        detail = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        outcome = malformed_body(detail)
        return JSONResponse(
            status_code=outcome.status_code,
            content=outcome.response.model_dump(by_alias=True),
        )

    # Include the run-program router
    app.include_router(run_program.router)

    @app.get("/")
    async def root():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "message": "Code Runner API"
        }

    return app
