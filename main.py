# main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional
import logging
import time

import config
from database import Database
from errors import StudentAPIError
from responses import envelope_response
from routes import students

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)
request_logger = logging.getLogger("requests")


async def handle_student_error(request: Request, exc: StudentAPIError):
    return envelope_response(exc.status_code, False, exc.message, errors=exc.errors)


async def handle_http_error(request: Request, exc: StarletteHTTPException):
    # Unknown paths and unsupported methods on known paths both mean no route matched.
    if exc.status_code in (404, 405):
        return envelope_response(404, False, "Route not found")
    return envelope_response(exc.status_code, False, str(exc.detail))


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return envelope_response(500, False, "Internal server error")


def create_app(database: Optional[Database] = None) -> FastAPI:
    database = database or Database(config.MONGODB_URI, config.DB_NAME)

    app = FastAPI(title="Student CRUD API")
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        request_logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.3f} ms")
        return response

    app.add_exception_handler(StudentAPIError, handle_student_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(students.router)

    @app.get("/")
    async def home():
        return {"message": "Welcome to Student CRUD API"}

    @app.on_event("startup")
    async def startup_event():
        await database.connect()

    @app.on_event("shutdown")
    async def shutdown_event():
        await database.close()

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=config.HOST, port=config.PORT, reload=True)
