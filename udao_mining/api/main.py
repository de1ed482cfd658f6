from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog
import time

from udao_mining.api.routers.actions import router as actions_router
from udao_mining.api.routers.tokens import router as tokens_router
from udao_mining.api.models import ErrorResponse
from udao_mining.config import settings
from udao_mining.database.connection import init_db
from udao_mining.utils.exceptions import LedgerErrorCodes, LedgerException
from udao_mining.utils.logging import setup_logging

setup_logging(settings.LOG_LEVEL)
logger = structlog.get_logger()

ERROR_STATUS = {
    LedgerErrorCodes.NOT_FOUND: 404,
    LedgerErrorCodes.ALREADY_EXISTS: 409,
    LedgerErrorCodes.UNAUTHORIZED: 403,
    LedgerErrorCodes.POLICY_DENIED: 403,
}

app = FastAPI(
    title="UDAO Mining Ledger",
    description="Token ledger with a time-gated halving issuance schedule",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(tokens_router, tags=["Ledger"])
app.include_router(actions_router, tags=["Actions"])


@app.on_event("startup")
def create_tables():
    init_db()


@app.exception_handler(LedgerException)
async def ledger_exception_handler(request, exc: LedgerException):
    status_code = ERROR_STATUS.get(exc.error_code, 400)
    logger.info(
        "Ledger request rejected",
        path=request.url.path,
        error_code=exc.error_code,
        status_code=status_code,
    )
    body = ErrorResponse(detail=exc.message, error_code=exc.error_code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.middleware("http")
async def log_requests(request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    logger.info(
        "Request completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        process_time=round(process_time, 3),
    )
    return response


@app.get("/")
async def root():
    return {"message": "UDAO Mining Ledger API", "version": settings.VERSION}
