"""Relief Bounded Context.

Responsible for the 3D relief block:
- Value Objects: WallSegment, WallPolygon, CameraPlan, Block
- Ports: SceneRenderer
- Services: edge interpolation, concurrent sampling, base altitude,
  wall construction, camera framing, BlockGenerator
"""
