"""
Exceptions raised by the Cardroom engine and server.
"""


class CardroomError(Exception):
    """Base class for all Cardroom errors."""


class DeckExhaustedError(CardroomError):
    """Raised when a card is drawn from an empty deck."""


class MalformedPayloadError(CardroomError):
    """Raised when an inbound message cannot be turned into a command."""
