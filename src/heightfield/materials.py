"""Surface materials assigned to terrain cells."""

from enum import Enum


class Material(str, Enum):
    """Materials an exporter can paint onto a terrain column."""

    ROCK = "rock"
    GROUND = "ground"
    GRASS = "grass"

    @property
    def code(self) -> int:
        """Compact integer code used for array storage."""
        return _MATERIAL_CODES[self]


_MATERIAL_CODES = {
    Material.ROCK: 0,
    Material.GROUND: 1,
    Material.GRASS: 2,
}


def material_from_code(code: int) -> Material:
    """Convert a stored integer code back to a Material."""
    for material, value in _MATERIAL_CODES.items():
        if value == code:
            return material
    raise ValueError(f"Unknown material code: {code}")
