from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from database import init_db
from auth import require_secret_key
from exceptions import (
    ApiError,
    api_exception_handler,
    request_validation_exception_handler,
    unhandled_exception_handler,
)
import users as users_router, projects as projects_router, bugs as bugs_router
import logging
import os

API_PREFIX = os.getenv("API_PREFIX", "/api")

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # refuse to boot without a token secret
    require_secret_key()
    init_db()
    logger.info(f"Bug tracker API ready under {API_PREFIX}")
    yield


app = FastAPI(title="Bug Tracker API", lifespan=lifespan)

app.add_exception_handler(ApiError, api_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.include_router(projects_router.router, prefix=API_PREFIX)
app.include_router(bugs_router.router, prefix=API_PREFIX)
app.include_router(users_router.router, prefix=API_PREFIX)

@app.get("/")
def root():
    return {"msg": "Bug tracker API up, see /docs"}
