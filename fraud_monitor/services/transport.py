"""
WebSocket push channel: connection tracking and event delivery
"""
import asyncio
import logging
import uuid
from typing import Any, Dict, List, Optional, Set

from fastapi import WebSocket

from fraud_monitor import config
from fraud_monitor.services.rooms import RoomRegistry

logger = logging.getLogger(__name__)


def frame(event: str, data: Any) -> Dict[str, Any]:
    """Wire format of every server -> client message"""
    return {"event": event, "data": data}


class _Connection:
    def __init__(self, websocket: WebSocket, max_queued: int):
        self.websocket = websocket
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=max_queued)
        self.writer: Optional[asyncio.Task] = None


class ConnectionManager:
    """Holds the open WebSocket connections and delivers events to them.

    Every connection has its own outbound queue and writer task, so frames
    reach a client in the order they were queued and a stalled client only
    delays itself. Delivery is fire-and-forget: a send that fails or exceeds
    `send_timeout`, or a full queue, drops that client. Nothing is retried.
    """

    def __init__(
        self,
        registry: Optional[RoomRegistry] = None,
        send_timeout: float = config.WS_SEND_TIMEOUT,
        max_queued: int = config.WS_MAX_QUEUED,
    ):
        self.registry = registry if registry is not None else RoomRegistry()
        self.send_timeout = send_timeout
        self.max_queued = max_queued
        self._connections: Dict[str, _Connection] = {}
        self._closing: Set[asyncio.Task] = set()

    async def connect(self, websocket: WebSocket) -> str:
        await websocket.accept()
        connection_id = uuid.uuid4().hex
        conn = _Connection(websocket, self.max_queued)
        # handshake goes first, before the client can be a broadcast target
        conn.queue.put_nowait(frame("connect", {"id": connection_id}))
        conn.writer = asyncio.get_running_loop().create_task(self._writer(connection_id, conn))
        self._connections[connection_id] = conn
        logger.info(f"🔌 Client connected: {connection_id}")
        return connection_id

    def disconnect(self, connection_id: str):
        conn = self._connections.pop(connection_id, None)
        self.registry.leave_all(connection_id)
        if conn is None:
            return
        self._discard_queued(conn)
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if conn.writer is not None and conn.writer is not current:
            conn.writer.cancel()
        logger.info(f"❌ Client disconnected: {connection_id}")

    def subscribe(self, connection_id: str, room: str):
        self.registry.join(connection_id, room)
        logger.info(f"📡 Client subscribed to {room}: {connection_id}")

    def connection_count(self) -> int:
        return len(self._connections)

    def _targets(self, room: Optional[str]) -> List[str]:
        if room is None:
            return list(self._connections)
        return [cid for cid in self.registry.members(room) if cid in self._connections]

    def send(self, connection_id: str, event: str, data: Any) -> bool:
        """Queue one frame for a single connection"""
        conn = self._connections.get(connection_id)
        if conn is None:
            return False
        return self._enqueue(connection_id, conn, frame(event, data))

    def emit(self, event: str, data: Any, room: Optional[str] = None) -> int:
        """Queue `event` for every member of `room`, or every client.

        Returns the number of connections the event was queued for.
        """
        targets = self._targets(room)
        if not targets:
            return 0

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"⚠️ No running event loop, dropping '{event}' for {len(targets)} client(s)")
            return 0

        message = frame(event, data)
        return sum(
            1 for cid in targets
            if self._enqueue(cid, self._connections[cid], message)
        )

    def _enqueue(self, connection_id: str, conn: _Connection, message: Dict[str, Any]) -> bool:
        try:
            conn.queue.put_nowait(message)
            return True
        except asyncio.QueueFull:
            logger.warning(f"⚠️ {connection_id} has {self.max_queued} frames pending, dropping client")
            self._drop(connection_id, conn)
            return False

    async def _writer(self, connection_id: str, conn: _Connection):
        while True:
            message = await conn.queue.get()
            try:
                await asyncio.wait_for(conn.websocket.send_json(message), self.send_timeout)
            except asyncio.TimeoutError:
                logger.warning(f"⚠️ Sending '{message['event']}' to {connection_id} timed out, dropping client")
                self._drop(connection_id, conn)
                return
            except Exception as e:
                logger.warning(f"⚠️ Could not deliver '{message['event']}' to {connection_id}: {e}")
                self._drop(connection_id, conn)
                return
            finally:
                conn.queue.task_done()

    def _discard_queued(self, conn: _Connection):
        while True:
            try:
                conn.queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            conn.queue.task_done()

    def _drop(self, connection_id: str, conn: _Connection):
        self.disconnect(connection_id)
        task = asyncio.get_running_loop().create_task(self._close(conn.websocket))
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)

    async def _close(self, websocket: WebSocket):
        try:
            await asyncio.wait_for(websocket.close(), self.send_timeout)
        except Exception as e:
            logger.debug(f"Close after failed send raised: {e}")

    async def drain(self):
        """Wait until every queued frame is sent or its client dropped"""
        await asyncio.gather(*(c.queue.join() for c in list(self._connections.values())))
        if self._closing:
            await asyncio.gather(*list(self._closing), return_exceptions=True)
