"""lufasu: a Monte Carlo path tracer built on Taichi.

This package renders scenes of spheres with physically motivated materials:
- Iterative path tracing with a bounce limit and a sky gradient background
- Lambertian, metal (fuzzy mirror) and dielectric (glass) materials
- Thin-lens camera with depth of field
- Deterministic, per-pixel random streams for reproducible parallel renders

Subpackages:
    core: Rays, random streams, the integrator and the band-wise renderer
    geometry: Sphere primitive and hit records
    materials: Scattering models and their parameter registries
    scene: Scene storage, building, serialization and presets
    camera: Thin-lens camera with ray generation
    preview: Color conversion, PNG export and Matplotlib preview

Taichi must be initialized (``ti.init``) before importing the subpackages,
since they allocate Taichi fields at import time.
"""

__version__ = "0.1.0"
