"""Live dashboard feed

Staff dashboards receive every broadcast event (booking:created,
booking:updated, invoice:created, invoice:sent, payment:received,
payment:refunded) as JSON.
"""

import asyncio
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from src.app.services.authenticator import AuthenticationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


@router.websocket("/ws/dashboard")
async def dashboard_feed(websocket: WebSocket):
    token = websocket.query_params.get("token")
    state = websocket.app.state
    try:
        if state.config.AUTH_DISABLED:
            allowed = True
        else:
            claims = state.authenticator.validate(token) if token else None
            allowed = claims is not None and not claims.is_customer and claims.role is not None
    except AuthenticationError as e:
        logger.info(f"Dashboard connection rejected: {e}")
        allowed = False

    if not allowed:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    broadcaster = state.broadcaster
    queue = broadcaster.subscribe()
    await websocket.send_json({"type": "connected", "data": {}})

    receiver = asyncio.create_task(_drain_client(websocket))
    try:
        while not receiver.done():
            getter = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait(
                {getter, receiver}, return_when=asyncio.FIRST_COMPLETED
            )
            if getter in done:
                await websocket.send_json(getter.result())
            else:
                getter.cancel()
    except WebSocketDisconnect:
        pass
    finally:
        receiver.cancel()
        broadcaster.unsubscribe(queue)
        logger.debug(f"Dashboard subscriber left; {broadcaster.subscriber_count} remaining")


async def _drain_client(websocket: WebSocket):
    """Read (and ignore) client frames until the socket closes"""
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return
