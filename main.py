from dotenv import load_dotenv
load_dotenv()   # <-- Must be first!
import logging
from functools import lru_cache
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from config import Settings
from errors import ApiError, MethodNotAllowedError
from logging_config import setup_logging
from services.events import extract_meeting
from services.intake import authorize, parse_email
from services.llm import CompletionClient


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()


def get_completion_client(settings: Settings = Depends(get_settings)) -> CompletionClient:
    return CompletionClient(settings)


setup_logging(get_settings().log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Meeting Parser")

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

# ------------- CORS -------------
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


@app.middleware("http")
async def add_cors_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response
# ------------------------------------------------


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.error("%s %s -> %d %s: %s", request.method, request.url.path, exc.status_code, exc.error, exc.detail)
    else:
        logger.info("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.error)
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


# Router-level errors (e.g. a method outside ALL_METHODS) use the same envelope
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        return await api_error_handler(request, MethodNotAllowedError())
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception while parsing %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse({"error": "Internal server error"}, status_code=500, headers=CORS_HEADERS)


@app.api_route("/{path:path}", methods=ALL_METHODS)
async def parse_meeting(
    request: Request,
    settings: Settings = Depends(get_settings),
    client: CompletionClient = Depends(get_completion_client),
):
    if request.method == "OPTIONS":
        return Response(status_code=200)

    # Only POST is allowed beyond this point
    if request.method != "POST":
        raise MethodNotAllowedError()

    raw = await request.body()
    email = parse_email(raw or None)

    # Body is valid; now the caller must prove who they are
    authorize(request.headers.get("authorization"), settings.auth_token)

    logger.info("Parsing email %r (%d chars)", email.subject[:80], len(email.body))
    record = await extract_meeting(email, settings, client)
    return JSONResponse(record.model_dump())


if __name__ == "__main__":
    import os
    import uvicorn

    logger.info("Starting Meeting Parser API server")
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        log_config=None,  # Use our custom logging
    )
