"""Materials module for surface scattering models.

Components:
    lambertian: Ideal diffuse reflection (normal + random point in unit ball)
    metal: Mirror reflection roughened by a fuzz radius
    dielectric: Glass-like refraction with Schlick-weighted reflection

Every material exposes a scatter function returning
``(scattered_direction, attenuation, did_scatter)``; did_scatter == 0 means
the path was absorbed. Material parameters live in per-type registries
(Taichi fields); the scene manager maps a unified material ID to a
(type, type-local index) pair for dispatch.
"""

from .dielectric import (
    MAX_DIELECTRIC_MATERIALS,
    add_dielectric_material,
    clear_dielectric_materials,
    dielectric_interface,
    get_dielectric_index,
    get_dielectric_material_count,
    scatter_dielectric,
)
from .lambertian import (
    MAX_LAMBERTIAN_MATERIALS,
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    validate_albedo,
)
from .metal import (
    MAX_METAL_MATERIALS,
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
)

__all__ = [
    # Lambertian
    "MAX_LAMBERTIAN_MATERIALS",
    "scatter_lambertian",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    "validate_albedo",
    # Metal
    "MAX_METAL_MATERIALS",
    "scatter_metal",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "MAX_DIELECTRIC_MATERIALS",
    "scatter_dielectric",
    "dielectric_interface",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_index",
]
