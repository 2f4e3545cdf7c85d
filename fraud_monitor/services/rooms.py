"""
Room membership for the push channel
"""
from typing import Dict, List

from fraud_monitor.config import FRAUD_ALERTS_ROOM


class RoomRegistry:
    """Tracks which connections belong to which broadcast room.

    Membership is process-local and in memory. Joining twice or leaving a room
    the connection is not in are no-ops. All access happens on the event loop
    thread, so no locking is needed.
    """

    def __init__(self):
        # room -> ordered set of connection ids (dict keys keep join order)
        self._rooms: Dict[str, Dict[str, None]] = {}

    def join(self, connection_id: str, room: str = FRAUD_ALERTS_ROOM):
        self._rooms.setdefault(room, {})[connection_id] = None

    def leave(self, connection_id: str, room: str = FRAUD_ALERTS_ROOM):
        members = self._rooms.get(room)
        if members is None:
            return
        members.pop(connection_id, None)
        if not members:
            del self._rooms[room]

    def leave_all(self, connection_id: str):
        """Drop every membership of a connection (on disconnect)"""
        for room in list(self._rooms):
            self.leave(connection_id, room)

    def members(self, room: str = FRAUD_ALERTS_ROOM) -> List[str]:
        return list(self._rooms.get(room, ()))

    def is_member(self, connection_id: str, room: str = FRAUD_ALERTS_ROOM) -> bool:
        return connection_id in self._rooms.get(room, ())

    def rooms(self) -> List[str]:
        return list(self._rooms)
