"""Host-side scene building.

Every material, whatever its kind, gets one id from a shared counter. Two
kernel-visible tables translate that id for the integrator:

    material_types[id]         -> MaterialType of the material
    material_type_indices[id]  -> slot in that kind's own registry

Spheres reference materials only through the shared id, and any number of
spheres may use the same one.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from lufasu.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> gray = scene.add_lambertian_material((0.5, 0.5, 0.5))
    >>> scene.add_sphere((0.0, 0.0, -1.0), 0.5, gray)
    0
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import taichi as ti
import taichi.math as tm

from lufasu.materials import dielectric, lambertian, metal
from lufasu.scene.intersection import MAX_SPHERES, add_sphere, clear_scene, get_sphere_count

logger = logging.getLogger(__name__)

vec3 = tm.vec3


class MaterialType(IntEnum):
    """Kinds of surface; the value is the tag stored in material_types."""

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


MAX_MATERIALS = (
    lambertian.MAX_LAMBERTIAN_MATERIALS
    + metal.MAX_METAL_MATERIALS
    + dielectric.MAX_DIELECTRIC_MATERIALS
)

material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


@dataclass(frozen=True)
class _MaterialKind:
    register: Callable[..., int]
    clear: Callable[[], None]
    defaults: dict[str, Any]


# Registry functions and config defaults per kind, in MaterialType order
_KINDS: dict[MaterialType, _MaterialKind] = {
    MaterialType.LAMBERTIAN: _MaterialKind(
        lambertian.add_lambertian_material,
        lambertian.clear_lambertian_materials,
        {"albedo": (0.5, 0.5, 0.5)},
    ),
    MaterialType.METAL: _MaterialKind(
        metal.add_metal_material,
        metal.clear_metal_materials,
        {"albedo": (0.8, 0.8, 0.8), "fuzz": 0.0},
    ),
    MaterialType.DIELECTRIC: _MaterialKind(
        dielectric.add_dielectric_material,
        dielectric.clear_dielectric_materials,
        {"refractive_index": 1.5},
    ),
}


def _clear_material_tracking() -> None:
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """MaterialType tag of a material id, or -1 if the id is unassigned."""
    tag = -1
    if 0 <= material_id < num_materials[None]:
        tag = material_types[material_id]
    return tag


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Registry slot of a material id within its kind, or -1 if unassigned."""
    slot = -1
    if 0 <= material_id < num_materials[None]:
        slot = material_type_indices[material_id]
    return slot


@dataclass
class MaterialInfo:
    """Host-side record of one material.

    Attributes:
        material_id: Shared id used by spheres.
        material_type: Kind of surface.
        type_index: Slot in the kind's registry.
        params: Constructor arguments, kept for serialization.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Host-side record of one sphere, mirroring its slot in the scene fields."""

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Plain-data form of a scene.

    Attributes:
        materials: One dict per material, indexed by material id. Each has a
            "type" key ("lambertian", "metal" or "dielectric") plus that
            kind's parameters.
        spheres: One dict per sphere with "center", "radius" and
            "material_id", in insertion order.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _to_plain(value: Any) -> Any:
    return list(value) if isinstance(value, tuple) else value


def _vec3_tuple(values: Any) -> tuple[float, float, float]:
    x, y, z = values
    return (float(x), float(y), float(z))


class SceneManager:
    """Builds the global scene that the render kernels read.

    The sphere and material fields are process-wide, so constructing a
    SceneManager (or calling clear()) wipes whatever scene was there before.

    Attributes:
        materials: MaterialInfo per material id.
        spheres: SphereInfo per sphere, in insertion order.

    Example:
        >>> scene = SceneManager()
        >>> ground = scene.add_lambertian_material((0.8, 0.8, 0.0))
        >>> glass = scene.add_dielectric_material(1.5)
        >>> scene.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
        0
        >>> scene.add_sphere((0.0, 0.0, -1.0), 0.5, glass)
        1
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.clear()

    def clear(self) -> None:
        """Remove every sphere and material, host-side and in the fields."""
        clear_scene()
        for kind in _KINDS.values():
            kind.clear()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()

    # -------------------------------------------------------------------------
    # Materials
    # -------------------------------------------------------------------------

    def add_material(self, material_type: MaterialType, **params: Any) -> int:
        """Register a material of any kind and return its shared id.

        Args:
            material_type: Kind of surface.
            **params: Arguments of the kind's registry function, e.g.
                albedo and fuzz for METAL.

        Raises:
            ValueError: If the kind's registry rejects the parameters.
            RuntimeError: If the kind's registry or the shared id space is full.
        """
        material_id = int(num_materials[None])
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        type_index = _KINDS[material_type].register(**params)

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(MaterialInfo(material_id, material_type, type_index, dict(params)))
        logger.debug("Material %d: %s %s", material_id, material_type.name.lower(), params)
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Diffuse material; albedo components must lie in [0, 1]."""
        return self.add_material(MaterialType.LAMBERTIAN, albedo=albedo)

    def add_metal_material(self, albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
        """Reflective material; fuzz 0 is a perfect mirror, 1 the roughest."""
        return self.add_material(MaterialType.METAL, albedo=albedo, fuzz=fuzz)

    def add_dielectric_material(self, refractive_index: float = 1.5) -> int:
        """Clear refractive material such as glass (1.5) or water (1.33)."""
        return self.add_material(MaterialType.DIELECTRIC, refractive_index=refractive_index)

    def get_material_count(self) -> int:
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Host-side counterpart of the get_material_type kernel function."""
        info = self.get_material_info(material_id)
        return None if info is None else info.material_type

    # -------------------------------------------------------------------------
    # Spheres
    # -------------------------------------------------------------------------

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Append a sphere and return its index in the scene fields.

        Raises:
            ValueError: If material_id is not assigned or radius <= 0.
            RuntimeError: If MAX_SPHERES spheres already exist.
        """
        if not 0 <= material_id < num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

        sphere_index = add_sphere(vec3(center[0], center[1], center[2]), radius, material_id)
        self.spheres.append(SphereInfo(sphere_index, center, radius, material_id))
        logger.debug("Sphere %d: center=%s radius=%s material=%d", sphere_index, center, radius, material_id)
        return sphere_index

    def add_lambertian_sphere(self, center, radius, albedo) -> tuple[int, int]:
        """Sphere with its own new diffuse material; returns (sphere, material)."""
        material_id = self.add_lambertian_material(albedo)
        return self.add_sphere(center, radius, material_id), material_id

    def add_metal_sphere(self, center, radius, albedo, fuzz=0.0) -> tuple[int, int]:
        """Sphere with its own new metal material; returns (sphere, material)."""
        material_id = self.add_metal_material(albedo, fuzz)
        return self.add_sphere(center, radius, material_id), material_id

    def add_dielectric_sphere(self, center, radius, refractive_index=1.5) -> tuple[int, int]:
        """Sphere with its own new dielectric material; returns (sphere, material)."""
        material_id = self.add_dielectric_material(refractive_index)
        return self.add_sphere(center, radius, material_id), material_id

    def get_sphere_count(self) -> int:
        return get_sphere_count()

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_config(self) -> SceneConfig:
        """Snapshot the scene as plain lists and dicts (JSON friendly)."""
        materials = [
            {"type": info.material_type.name.lower()}
            | {key: _to_plain(value) for key, value in info.params.items()}
            for info in self.materials
        ]
        spheres = [
            {"center": list(s.center), "radius": s.radius, "material_id": s.material_id}
            for s in self.spheres
        ]
        return SceneConfig(materials=materials, spheres=spheres)

    def from_config(self, config: SceneConfig) -> None:
        """Replace the current scene with the one described by config.

        Missing material parameters take the kind's defaults. Materials are
        loaded before spheres so that sphere material ids resolve.

        Raises:
            ValueError: On an unknown material type or invalid parameters.
        """
        self.clear()

        for entry in config.materials:
            name = str(entry.get("type", "")).upper()
            if name not in MaterialType.__members__:
                raise ValueError(f"Unknown material type: {entry.get('type')!r}")
            material_type = MaterialType[name]

            params = dict(_KINDS[material_type].defaults)
            params.update((key, entry[key]) for key in params if key in entry)
            if "albedo" in params:
                params["albedo"] = _vec3_tuple(params["albedo"])
            self.add_material(material_type, **params)

        for entry in config.spheres:
            self.add_sphere(
                _vec3_tuple(entry.get("center", (0.0, 0.0, 0.0))),
                entry.get("radius", 1.0),
                entry.get("material_id", 0),
            )

    def to_dict(self) -> dict[str, Any]:
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from to_dict() output (e.g. after a JSON round trip)."""
        self.from_config(
            SceneConfig(materials=data.get("materials", []), spheres=data.get("spheres", []))
        )

    @staticmethod
    def get_max_spheres() -> int:
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        return MAX_MATERIALS
