# websocket.py
import json
import logging

from fastapi import APIRouter, WebSocket
from starlette.websockets import WebSocketDisconnect

from fraud_monitor.config import FRAUD_ALERTS_ROOM

logger = logging.getLogger(__name__)

router = APIRouter()

SUBSCRIBE_FRAUD_ALERTS = "subscribe:fraud-alerts"


def parse_client_event(message: str):
    """Client frames are either a bare event name or {"event": name}"""
    try:
        payload = json.loads(message)
    except ValueError:
        return message.strip()
    if isinstance(payload, dict):
        return payload.get("event")
    if isinstance(payload, str):
        return payload
    return None


@router.websocket("/ws")
async def push_channel(websocket: WebSocket):
    manager = websocket.app.state.connections
    # the manager queues the `connect` handshake frame
    connection_id = await manager.connect(websocket)
    try:
        while True:
            event = parse_client_event(await websocket.receive_text())
            if event == SUBSCRIBE_FRAUD_ALERTS:
                manager.subscribe(connection_id, FRAUD_ALERTS_ROOM)
                manager.send(connection_id, "subscribed", {"room": FRAUD_ALERTS_ROOM})
            else:
                logger.debug(f"Ignoring unknown event {event!r} from {connection_id}")
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(connection_id)
