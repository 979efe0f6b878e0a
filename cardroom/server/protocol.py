"""
Wire protocol for the Cardroom server.

Clients send JSON text frames shaped like ``{"type": <action>, "data": {...}}``.
This module turns a frame into a room id and a table `Command`, raising
`MalformedPayloadError` for anything it cannot understand so that no table
state is touched.
"""

import json
import uuid
from typing import Any, Dict, Tuple

from cardroom.events.websocket import ClientMessage
from cardroom.exceptions import MalformedPayloadError
from cardroom.state.commands import (
    Bet,
    Command,
    DebugState,
    DoubleDown,
    Hit,
    Join,
    NextGame,
    Ready,
    Reset,
    Stand,
)

MAX_NAME_LENGTH = 32

# Actions whose payload is just the room id
_ROOM_ACTIONS = {
    ClientMessage.PLAYER_READY: Ready,
    ClientMessage.HIT: Hit,
    ClientMessage.STAND: Stand,
    ClientMessage.DOUBLE_DOWN: DoubleDown,
    ClientMessage.RESET_GAME: Reset,
    ClientMessage.NEXT_GAME: NextGame,
    ClientMessage.DEBUG_GAME_STATE: DebugState,
}


def decode_message(raw: Any) -> Tuple[str, Dict[str, Any]]:
    """
    Decode a text frame into its action type and data.

    Args:
        raw: The frame received from the client

    Returns:
        Tuple of (action type, data dictionary)

    Raises:
        MalformedPayloadError: If the frame is not a JSON object with a string
            ``type`` and an object ``data``
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedPayloadError("Message is not valid UTF-8") from exc

    try:
        message = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise MalformedPayloadError("Message is not valid JSON") from exc

    if not isinstance(message, dict):
        raise MalformedPayloadError("Message must be a JSON object")

    message_type = message.get("type")
    if not isinstance(message_type, str) or not message_type:
        raise MalformedPayloadError("Message type is missing")

    data = message.get("data", {})
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MalformedPayloadError("Message data must be an object")

    return message_type, data


def _room_id(data: Dict[str, Any]) -> str:
    room_id = data.get("roomId")
    if not isinstance(room_id, str) or not room_id.strip():
        raise MalformedPayloadError("roomId is required")
    return room_id.strip()


def _amount(data: Dict[str, Any]) -> int:
    amount = data.get("amount")
    if isinstance(amount, bool):
        raise MalformedPayloadError("amount must be a number")
    if isinstance(amount, float) and amount.is_integer():
        return int(amount)
    if not isinstance(amount, int):
        raise MalformedPayloadError("amount must be a whole number")
    return amount


def parse_command(
    message_type: str, data: Dict[str, Any], connection_id: str
) -> Tuple[str, Command]:
    """
    Build the table command for an inbound action.

    Args:
        message_type: The action name, e.g. ``"placeBet"``
        data: The action payload
        connection_id: Id of the connection that sent the action

    Returns:
        Tuple of (room id, command)

    Raises:
        MalformedPayloadError: For unknown actions or invalid payload fields
    """
    if message_type == ClientMessage.JOIN_GAME:
        name = data.get("playerName")
        if not isinstance(name, str) or not name.strip():
            raise MalformedPayloadError("playerName is required")
        name = name.strip()
        if len(name) > MAX_NAME_LENGTH:
            raise MalformedPayloadError(
                f"playerName must be at most {MAX_NAME_LENGTH} characters"
            )
        room_id = data.get("roomId")
        if room_id is None or (isinstance(room_id, str) and not room_id.strip()):
            room_id = str(uuid.uuid4())
        elif isinstance(room_id, str):
            room_id = room_id.strip()
        else:
            raise MalformedPayloadError("roomId must be a string")
        return room_id, Join(connection_id, player_name=name)

    if message_type == ClientMessage.PLACE_BET:
        return _room_id(data), Bet(connection_id, amount=_amount(data))

    command_type = _ROOM_ACTIONS.get(message_type)
    if command_type is None:
        raise MalformedPayloadError(f"Unknown message type: {message_type}")
    return _room_id(data), command_type(connection_id)
