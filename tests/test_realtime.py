import asyncio

import pytest
from fastapi import BackgroundTasks
from starlette.websockets import WebSocketDisconnect

from pharmasys.realtime import ChangeBroadcaster, broadcaster, notify_change


class FakeSocket:
    def __init__(self, broken=False):
        self.broken = broken
        self.accepted = False
        self.sent = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, payload):
        if self.broken:
            raise RuntimeError("connection closed")
        self.sent.append(payload)


def test_publish_reaches_table_subscribers_only():
    hub = ChangeBroadcaster()
    items_ws, sales_ws = FakeSocket(), FakeSocket()

    async def scenario():
        await hub.connect("items", items_ws)
        await hub.connect("sales", sales_ws)
        await hub.publish("items", "UPDATE", 7)

    asyncio.run(scenario())

    assert items_ws.accepted
    assert items_ws.sent == [{"table": "items", "event": "UPDATE", "id": 7}]
    assert sales_ws.sent == []


def test_dead_subscribers_are_dropped():
    hub = ChangeBroadcaster()
    alive, dead = FakeSocket(), FakeSocket(broken=True)

    async def scenario():
        await hub.connect("items", alive)
        await hub.connect("items", dead)
        await hub.publish("items", "INSERT", 1)

    asyncio.run(scenario())

    assert hub.subscriber_count("items") == 1
    assert alive.sent == [{"table": "items", "event": "INSERT", "id": 1}]


def test_notify_change_publishes_after_response():
    ws = FakeSocket()
    broadcaster.channels["suppliers"].add(ws)
    try:
        tasks = BackgroundTasks()
        notify_change(tasks, "suppliers", "DELETE", 3)
        assert ws.sent == []

        asyncio.run(tasks())
        assert ws.sent == [{"table": "suppliers", "event": "DELETE", "id": 3}]
    finally:
        broadcaster.disconnect("suppliers", ws)


def test_unknown_table_is_refused(anon_client):
    with pytest.raises(WebSocketDisconnect):
        with anon_client.websocket_connect("/realtime/users"):
            pass
