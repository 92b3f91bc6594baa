from __future__ import annotations

from tenderdesk.collab.relay import RoomManager, manager, room_name

__all__ = ["RoomManager", "manager", "room_name"]
