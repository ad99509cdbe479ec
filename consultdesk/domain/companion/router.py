"""Companion router - Client workspace chat relay"""

from fastapi import APIRouter, Depends, Request

from ...context import AppContext, get_context
from ...shared.request_utils import read_json_object
from .service import CompanionProxy

router = APIRouter(prefix="/client", tags=["Companion"])


def get_companion_proxy(context: AppContext = Depends(get_context)) -> CompanionProxy:
    return CompanionProxy(context.settings.companion_webhook, context.http_client)


@router.post("/companion")
async def relay_companion_message(
    request: Request, proxy: CompanionProxy = Depends(get_companion_proxy)
):
    """Forward a chat message to the companion backend"""
    payload = await read_json_object(request)
    reply = await proxy.relay(payload.get("message"))
    return {"reply": reply}
