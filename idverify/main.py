import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from idverify.api.rate_limit import bucket_for, get_limiter
from idverify.api.routes import router as api_router
from idverify.observability.logging import log
from idverify.settings import settings
from idverify.web.routes import router as form_router

app = FastAPI(title="Identity Verification API")

origins = [x.strip() for x in settings.CORS_ORIGINS.split(",") if x.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)
app.include_router(form_router)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "X-DNS-Prefetch-Control": "off",
    "Cross-Origin-Opener-Policy": "same-origin",
}


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def _client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@app.middleware("http")
async def guard_requests(request: Request, call_next):
    # Body cap is checked on the declared length; chunked uploads are not counted
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > settings.MAX_BODY_BYTES:
        log(event="request_too_large", path=request.url.path, contentLength=int(declared))
        return _failure(413, "Request body too large")

    if settings.RATE_LIMIT_ENABLED:
        client = _client_key(request)
        bucket = bucket_for(request.url.path)
        decision = get_limiter(bucket).hit(client)
        if not decision.allowed:
            log(event="rate_limited", client=client, path=request.url.path, bucket=bucket, limit=decision.limit)
            resp = _failure(429, settings.RATE_LIMIT_MESSAGE)
            resp.headers["Retry-After"] = str(decision.reset_after_sec)
            return resp
        response = await call_next(request)
        response.headers["RateLimit-Limit"] = str(decision.limit)
        response.headers["RateLimit-Remaining"] = str(decision.remaining)
        response.headers["RateLimit-Reset"] = str(decision.reset_after_sec)
        return response

    return await call_next(request)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
    except Exception as exc:
        # Errors escaping the routes would otherwise skip the headers below
        log(event="unhandled_error", path=request.url.path, error=type(exc).__name__, detail=str(exc)[:200])
        response = _failure(500, "Something went wrong!")
    for k, v in SECURITY_HEADERS.items():
        response.headers.setdefault(k, v)
    log(
        event="request_completed",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        durationMs=int((time.time() - start) * 1000),
    )
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Unknown paths and unsupported methods both mean "no such route" to callers
    if exc.status_code in (404, 405):
        return _failure(404, "Route not found")
    return _failure(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    log(event="request_invalid", path=request.url.path, errors=len(exc.errors()))
    return _failure(400, "Invalid request body")


@app.exception_handler(Exception)
async def universal_exception_handler(request: Request, exc: Exception):
    log(event="unhandled_error", path=request.url.path, error=type(exc).__name__, detail=str(exc)[:200])
    resp = _failure(500, "Something went wrong!")
    for k, v in SECURITY_HEADERS.items():
        resp.headers.setdefault(k, v)
    return resp


log(
    event="boot",
    env=settings.APP_ENV,
    verificationBackend=settings.VERIFICATION_BACKEND,
    rateLimitBackend=settings.RATE_LIMIT_BACKEND,
    rateLimit=f"{settings.RATE_LIMIT_MAX_REQUESTS}/{settings.RATE_LIMIT_WINDOW_SEC}s",
    rateLimitLive=f"{settings.RATE_LIMIT_LIVE_MAX_REQUESTS}/{settings.RATE_LIMIT_WINDOW_SEC}s",
)


def run() -> None:
    """Console entry point: serve the app on HOST:PORT."""
    import uvicorn

    log(event="server_starting", host=settings.HOST, port=settings.PORT)
    uvicorn.run("idverify.main:app", host=settings.HOST, port=settings.PORT)
