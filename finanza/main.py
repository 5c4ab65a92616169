from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from finanza.config import AUTO_CREATE_TABLES, DEFAULT_USER_ID, DEFAULT_USERNAME
from finanza.crud.crud_user import get_or_create_user
from finanza.db.core import Base, engine, session_local, NotFoundError, PersistenceError
from finanza.logging_config import setup_logging, get_logger
from finanza.services.errors import InvalidInputError
from finanza.routers.accounts import router as accounts_router
from finanza.routers.transactions import router as transactions_router
from finanza.routers.investments import router as investments_router
from finanza.routers.budgets import router as budgets_router
from finanza.routers.categories import router as categories_router
from finanza.routers.dashboard import router as dashboard_router

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    if AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)
        db = session_local()
        try:
            get_or_create_user(db, DEFAULT_USER_ID, DEFAULT_USERNAME)
        finally:
            db.close()
    logger.info("Finanza API started")
    yield


app = FastAPI(title="Finanza API", lifespan=lifespan)

app.include_router(accounts_router)
app.include_router(transactions_router)
app.include_router(investments_router)
app.include_router(budgets_router)
app.include_router(categories_router)
app.include_router(dashboard_router)


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(_: Request, exc: InvalidInputError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(_: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(PersistenceError)
async def persistence_error_handler(_: Request, exc: PersistenceError):
    logger.error(f"Store failure: {exc}")
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)})


@app.get("/")
def read_root():
    return "Server is running."
