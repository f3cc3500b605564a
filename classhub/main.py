# classhub/main.py
import logging
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from classhub.core.config import settings
from classhub.core.logging_config import setup_logging
from classhub.db.session import init_db
from classhub.api.v1.endpoints import auth, users, classrooms, uploads, messages, health, ws
from classhub import models  # noqa

logger = logging.getLogger(__name__)

setup_logging()

app = FastAPI(title=settings.PROJECT_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # custom validators carry the user-facing text, e.g. "Student ID required"
    errors = exc.errors()
    detail = "Missing required fields"
    if errors and errors[0].get("type") != "missing":
        msg = str(errors[0].get("msg", ""))
        detail = msg.removeprefix("Value error, ") or detail
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("Database ready, uploads served from %s", settings.UPLOAD_DIR)


app.include_router(auth.router, prefix=settings.API_PREFIX)
app.include_router(users.router, prefix=settings.API_PREFIX)
app.include_router(classrooms.router, prefix=settings.API_PREFIX)
app.include_router(uploads.router, prefix=settings.API_PREFIX)
app.include_router(messages.router, prefix=settings.API_PREFIX)
app.include_router(health.router, prefix=settings.API_PREFIX)
app.include_router(ws.router)

Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount(
    settings.UPLOAD_URL_PREFIX,
    StaticFiles(directory=settings.UPLOAD_DIR),
    name="uploads",
)


def run():
    import uvicorn

    uvicorn.run("classhub.main:app", host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
