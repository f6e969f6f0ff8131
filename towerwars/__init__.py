"""
Tower Wars - Multiplayer Card Battle Engine

The authoritative game-logic core for a turn-based card battle where each
player defends two tower cards with a shared 52-card deck.
The engine provides:
- Room lifecycle (create, join, options, start)
- Deck, discard and targeted card retrieval
- The per-turn action state machine
- Damage distribution, elimination and win detection
- Disconnect-driven turn forcing
"""

__version__ = "0.1.0"
