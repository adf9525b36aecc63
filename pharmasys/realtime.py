import logging
from collections import defaultdict
from typing import Any, Dict, Optional, Set

from fastapi import APIRouter, BackgroundTasks, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

REALTIME_TABLES = {
    "items", "item_categories", "item_types", "item_units",
    "patients", "doctors", "suppliers", "purchases", "sales",
}

router = APIRouter()


# ---------------- Change notifications (WebSocket) ----------------
class ChangeBroadcaster:

    def __init__(self):
        self.channels: Dict[str, Set[WebSocket]] = defaultdict(set)

    async def connect(self, table: str, ws: WebSocket):
        await ws.accept()
        self.channels[table].add(ws)

    def disconnect(self, table: str, ws: WebSocket):
        self.channels[table].discard(ws)

    def subscriber_count(self, table: str) -> int:
        return len(self.channels.get(table, ()))

    async def publish(self, table: str, event: str, row_id: Optional[Any] = None):
        payload = {"table": table, "event": event, "id": row_id}
        dead = []
        for ws in list(self.channels.get(table, ())):
            try:
                await ws.send_json(payload)
            except Exception:
                dead.append(ws)
        for ws in dead:
            logger.debug("Dropping dead subscriber on %s", table)
            self.disconnect(table, ws)


broadcaster = ChangeBroadcaster()


def notify_change(background_tasks: BackgroundTasks, table: str, event: str, row_id=None):
    """Queue a change event; it is published after the response is sent."""
    background_tasks.add_task(broadcaster.publish, table, event, row_id)


@router.websocket("/realtime/{table}")
async def realtime_ws(websocket: WebSocket, table: str):
    if table not in REALTIME_TABLES:
        await websocket.close(code=1008)
        return
    await broadcaster.connect(table, websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        broadcaster.disconnect(table, websocket)
