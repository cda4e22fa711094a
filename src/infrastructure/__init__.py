"""Infrastructure Layer.

Adapters implementing the domain ports: DEM loading and sampling (rasterio),
headless scene.
"""
