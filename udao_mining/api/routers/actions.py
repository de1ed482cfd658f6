import time

import structlog
from fastapi import APIRouter, Depends

from udao_mining.api.deps import get_dispatcher, invocation_lock
from udao_mining.api.models import ActionPayload, ErrorResponse, NotificationPayload, ReceiptResponse
from udao_mining.runtime.dispatcher import ActionDispatcher

logger = structlog.get_logger()

router = APIRouter(prefix="/v1")

REJECTIONS = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


def _now(requested):
    return int(time.time()) if requested is None else requested


@router.get("/health")
async def get_health_check():
    return {"status": "healthy"}


@router.post("/actions", response_model=ReceiptResponse, responses=REJECTIONS)
def push_action(payload: ActionPayload, dispatcher: ActionDispatcher = Depends(get_dispatcher)):
    with invocation_lock:
        receipt = dispatcher.push_action(
            payload.action,
            payload.data,
            payload.authorization,
            _now(payload.now),
        )
    return ReceiptResponse(**receipt.to_dict())


@router.post("/notifications", response_model=ReceiptResponse, responses=REJECTIONS)
def push_notification(payload: NotificationPayload, dispatcher: ActionDispatcher = Depends(get_dispatcher)):
    with invocation_lock:
        receipt = dispatcher.push_notification(
            payload.contract,
            payload.action,
            payload.data,
            _now(payload.now),
        )
    return ReceiptResponse(**receipt.to_dict())
