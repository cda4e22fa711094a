"""Infrastructure adapters for the 3D scene."""

from .memory_scene import InMemoryScene

__all__ = ["InMemoryScene"]
