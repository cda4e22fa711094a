"""Terrain Bounded Context.

Responsible for physical geography:
- Value Objects: GeoExtent, GeoPoint, SampledPoint, TerrainGrid
- Ports: TerrainRepository, TerrainSampler
- Services: extent validation/normalization, bilinear elevation lookup
"""
