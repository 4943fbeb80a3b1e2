"""Scene module for scene storage, building and presets.

This module handles scene representation and ray-scene queries:

Components:
    intersection: Sphere storage and the nearest-hit query
    manager: Unified scene manager coordinating spheres and materials
    presets: Ready-made scenes paired with a matching camera

Scene data is organized for efficient parallel access:
    - Structure-of-Arrays layout for geometric data
    - Contiguous material ID arrays
    - Read-only during a render
"""

from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
    material_type_indices,
    material_types,
    num_materials,
)
from .presets import (
    SCENE_PRESETS,
    create_material_showcase_scene,
    create_two_sphere_scene,
)

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "material_types",
    "material_type_indices",
    "num_materials",
    # Presets
    "create_two_sphere_scene",
    "create_material_showcase_scene",
    "SCENE_PRESETS",
]
