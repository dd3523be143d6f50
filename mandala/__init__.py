"""
Mandala - Two-player card game engine and room server.

A deterministic rules engine for the card game Mandala. Provides:
- Game state, deck handling and setup
- Action validation and application
- Destruction (claim) resolution and scoring
- Per-player redacted views
- Legal action enumeration and bot policies
- A FastAPI room server
"""

__version__ = "0.1.0"
