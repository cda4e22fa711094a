"""Drawing Bounded Context.

Responsible for the 2D square draw interaction:
- Value Objects: PlanarPoint, PlanarBounds, DrawnSquare, PanelBounds
- Ports: DrawSurface
- Services: build_square, reprojection, panel constraints
"""
