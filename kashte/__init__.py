"""
Kashte - Card-driven race board game engine

A deterministic rules engine for a Ludo / Ashte Kashte variant with heroes,
summonable support units and claimable portals. Provides:
- Immutable game state and a pure reducer
- Legal action generation and read-only queries
- Bot policies for AI seats
- A local HTTP surface and a command-line simulator
"""

__version__ = "0.1.0"
