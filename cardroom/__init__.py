"""
Cardroom: a multiplayer blackjack table server.

Clients join a room, place bets and play against the house while the server
broadcasts the authoritative table state after every action.
"""

__version__ = "0.1.0"
