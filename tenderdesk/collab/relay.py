"""
WebSocket relay for collaborative draft editing.

Peers join a room per tender and every frame a peer sends is forwarded,
unchanged, to the other peers of that room. The payloads are CRDT sync and
awareness messages produced by the clients; the relay never inspects them.
"""
import logging
from typing import Dict, List, Optional, Union

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from tenderdesk import config

logger = logging.getLogger(__name__)

Message = Union[str, bytes]


def room_name(tender_id: str) -> str:
    return f"{config.COLLAB_ROOM_PREFIX}{tender_id}"


class RoomManager:
    """Tracks the WebSocket peers of each editing room."""

    def __init__(self):
        self.rooms: Dict[str, List[WebSocket]] = {}

    async def connect(self, room: str, websocket: WebSocket):
        """Register the peer, then accept the connection."""
        self.rooms.setdefault(room, []).append(websocket)
        try:
            await websocket.accept()
        except Exception:
            self.disconnect(room, websocket)
            raise
        logger.info("Peer joined room %s. Peers in room: %d", room, len(self.rooms[room]))

    def disconnect(self, room: str, websocket: WebSocket):
        peers = self.rooms.get(room)
        if not peers:
            return
        if websocket in peers:
            peers.remove(websocket)
        if not peers:
            del self.rooms[room]
            logger.info("Room %s is empty and was closed", room)
        else:
            logger.info("Peer left room %s. Peers in room: %d", room, len(peers))

    def peer_count(self, room: str) -> int:
        return len(self.rooms.get(room, []))

    async def broadcast(self, room: str, message: Message, sender: Optional[WebSocket] = None):
        """Forward a frame to every accepted peer in the room except the sender.

        Peers still completing their handshake are skipped, not dropped; they
        resync through the CRDT protocol once connected.
        """
        dead_peers = []
        for peer in list(self.rooms.get(room, [])):
            if peer is sender:
                continue
            if peer.application_state != WebSocketState.CONNECTED:
                continue
            try:
                if isinstance(message, bytes):
                    await peer.send_bytes(message)
                else:
                    await peer.send_text(message)
            except Exception as e:
                logger.warning("Error relaying to a peer in room %s: %s. Removing.", room, e)
                dead_peers.append(peer)
        for peer in dead_peers:
            self.disconnect(room, peer)
            try:
                await peer.close(code=1011)
            except Exception as e:
                logger.debug("Dropped peer in room %s was already closed: %s", room, e)


manager = RoomManager()
