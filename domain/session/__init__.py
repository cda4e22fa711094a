"""Session Bounded Context.

Responsible for coordinating drawing and block generation:
- Value Objects: SessionPhase, PanelStatus, SessionContext
- Services: SessionCoordinator (state machine), RelayoutCoalescer
"""
