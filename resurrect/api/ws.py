"""WebSocket endpoint for live progress updates."""

import json
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..models.restoration import ProjectResurrectionRequest
from ..services.resurrection_manager import resurrection_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


class ConnectionManager:
    def __init__(self):
        self.active: list[WebSocket] = []

    async def connect(self, ws: WebSocket):
        await ws.accept()
        self.active.append(ws)

    def disconnect(self, ws: WebSocket):
        if ws in self.active:
            self.active.remove(ws)

    async def send(self, ws: WebSocket, message: dict):
        if ws not in self.active:
            return
        try:
            await ws.send_json(message)
        except (WebSocketDisconnect, RuntimeError):
            self.disconnect(ws)


manager = ConnectionManager()


def _progress_message(request: ProjectResurrectionRequest) -> dict:
    return {
        "type": "request_progress",
        "request_id": request.id,
        "status": request.status.value,
        "progress": request.progress.model_dump(mode="json"),
        "overrun": request.overrun is not None,
    }


@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    await manager.connect(ws)
    subscriptions = []

    try:
        while True:
            data = await ws.receive_text()
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                continue

            if msg.get("action") != "subscribe_request":
                continue
            request_id = msg.get("request_id")
            if not request_id or any(rid == request_id for rid, _ in subscriptions):
                continue

            async def request_cb(request):
                await manager.send(ws, _progress_message(request))

            resurrection_manager.add_progress_listener(request_id, request_cb)
            subscriptions.append((request_id, request_cb))

    except WebSocketDisconnect:
        logger.debug("WebSocket client disconnected")
    finally:
        for request_id, cb in subscriptions:
            resurrection_manager.remove_progress_listener(request_id, cb)
        manager.disconnect(ws)
