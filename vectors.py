from typing import NamedTuple

import numpy as np


# =============================================================================
# Vector3 routines
# =============================================================================

def vec3(x, y, z):
    """Build a 3D vector as a float64 array."""
    return np.array((x, y, z), dtype=np.float64)


def dot(v1, v2):
    return float(np.dot(v1, v2))


def subtract(v1, v2):
    return v1 - v2


def add(v1, v2):
    return v1 + v2


def multiply(k, v):
    """Computes k * v."""
    return k * v


def length(v):
    """Length of a 3D vector."""
    return np.sqrt(dot(v, v))


def normalize(v):
    """Normalize a vector. The vector must be non-zero."""
    return v / length(v)


def reflect_ray(ray, normal):
    """Mirror `ray` about `normal`: 2 * (ray . normal) * normal - ray."""
    return 2.0 * dot(ray, normal) * normal - ray


def multiply_mv(matrix, v):
    """Multiplies a 3x3 matrix and a vector (row-wise dot products)."""
    return np.array([dot(matrix[0], v), dot(matrix[1], v), dot(matrix[2], v)])


# =============================================================================
# Color routines
# =============================================================================

class Color(NamedTuple):
    """Integer color channels in blue, green, red order."""
    b: int
    g: int
    r: int


def color_multiply(i, c):
    """Computes i * color, truncating each channel toward zero."""
    return Color(int(i * c.b), int(i * c.g), int(i * c.r))


def color_add(c1, c2):
    return Color(c1.b + c2.b, c1.g + c2.g, c1.r + c2.r)


def clamp(c):
    """Clamps a color to the canonical [0, 255] range."""
    return Color(
        min(255, max(0, c.b)),
        min(255, max(0, c.g)),
        min(255, max(0, c.r)),
    )
