"""
Server side of Cardroom: wire protocol, room directory, dispatcher and the
WebSocket application.
"""

from cardroom.server.directory import GameDirectory
from cardroom.server.dispatcher import TableDispatcher

__all__ = ["GameDirectory", "TableDispatcher"]
