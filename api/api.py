from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse, Response
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR, HTTP_503_SERVICE_UNAVAILABLE

from api.config import check_db, create_db, get_settings
from api.routes.chat_routes import chat_routes
from api.routes.course_routes import course_routes
from api.routes.quiz_routes import quiz_routes
from api.routes.xp_routes import xp_routes
from api.utils.errors import LearnSphereError
from api.utils.logger import clear_request_id, configure_logging, set_request_id

logger = configure_logging()
settings = get_settings()

# Reachable before startup completes.
_ALWAYS_OPEN = {"/", "/health"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.ready = False
    create_db()
    check_db()
    app.state.ready = True
    logger.info("startup complete database ready")
    yield
    app.state.ready = False
    logger.info("shutdown")


app = FastAPI(title="LearnSphere", lifespan=lifespan)
app.state.ready = False
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_logger(request: Request, call_next):
    rid = set_request_id(request.headers.get("x-request-id"))
    try:
        if not app.state.ready and request.url.path not in _ALWAYS_OPEN:
            logger.warning("request rejected, not ready method=%s path=%s", request.method, request.url.path)
            response: Response = JSONResponse(
                status_code=HTTP_503_SERVICE_UNAVAILABLE,
                content={"message": "Service is starting up. Please retry shortly."},
            )
        else:
            logger.info("request start method=%s path=%s client=%s", request.method, request.url.path, request.client)
            response = await call_next(request)
            logger.info("request end status=%s method=%s path=%s", response.status_code, request.method, request.url.path)
        response.headers["x-request-id"] = rid
        return response
    except Exception:
        logger.exception("request error method=%s path=%s", request.method, request.url.path)
        raise
    finally:
        clear_request_id()


@app.exception_handler(LearnSphereError)
async def domain_exception_handler(request: Request, exc: LearnSphereError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s status=%s method=%s path=%s message=%s details=%s",
            type(exc).__name__,
            exc.status_code,
            request.method,
            request.url.path,
            exc.message,
            exc.details,
        )
    else:
        logger.warning(
            "%s status=%s method=%s path=%s message=%s",
            type(exc).__name__,
            exc.status_code,
            request.method,
            request.url.path,
            exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("http error status=%s method=%s path=%s detail=%s", exc.status_code, request.method, request.url.path, exc.detail)
    else:
        logger.warning("http error status=%s method=%s path=%s detail=%s", exc.status_code, request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    logger.warning("validation error method=%s path=%s errors=%s", request.method, request.url.path, errors)
    fields = [".".join(str(p) for p in e.get("loc", ()) if p not in ("body", "query", "path")) for e in errors]
    return JSONResponse(
        status_code=422,
        content={"message": "Invalid request.", "fields": [f for f in fields if f]},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Never leak internal exception details to clients.
    logger.exception("unhandled error method=%s path=%s", request.method, request.url.path)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal Server Error"},
    )


@app.get("/")
def read_root():
    return {"message": "LearnSphere backend is healthy"}


@app.get("/health")
def health():
    ready = bool(app.state.ready)
    return JSONResponse(
        status_code=200 if ready else HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if ready else "starting"},
    )


app.include_router(course_routes, prefix="/api")
app.include_router(quiz_routes, prefix="/api")
app.include_router(xp_routes, prefix="/api")
app.include_router(chat_routes, prefix="/api")

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
