"""Blockbild Domain Layer.

This package contains the core block generation logic organized by bounded
contexts:
- terrain: Extents, elevation lookup, terrain ports
- drawing: Square draw interaction geometry, planar reprojection
- relief: Wall segments, base altitude, wall rings, camera framing
- session: Draw/generate state machine and its context
- sharing: Share token codec and share URL parameter
"""

# Imports alphabetized per project style (isort)
from domain import drawing, relief, session, sharing, terrain

__all__ = ["drawing", "relief", "session", "sharing", "terrain"]
