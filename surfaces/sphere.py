import math

import numpy as np
from numba import njit

from vectors import Color


@njit(cache=True, nogil=True)
def intersect_ray_sphere(ray_origin, ray_direction, center, radius):
    """
    Solve the ray-sphere quadratic (JIT-compiled).

    Returns both roots as (t1, t2) with t1 from the "+" branch, or
    (inf, inf) when the ray misses. The pair is not sorted.
    """
    oc_x = ray_origin[0] - center[0]
    oc_y = ray_origin[1] - center[1]
    oc_z = ray_origin[2] - center[2]

    dx = ray_direction[0]
    dy = ray_direction[1]
    dz = ray_direction[2]

    k1 = dx*dx + dy*dy + dz*dz
    k2 = 2.0 * (oc_x*dx + oc_y*dy + oc_z*dz)
    k3 = oc_x*oc_x + oc_y*oc_y + oc_z*oc_z - radius*radius

    discriminant = k2*k2 - 4.0*k1*k3
    if discriminant < 0:
        return np.inf, np.inf

    sqrt_disc = math.sqrt(discriminant)
    t1 = (-k2 + sqrt_disc) / (2.0*k1)
    t2 = (-k2 - sqrt_disc) / (2.0*k1)
    return t1, t2


class Sphere:
    def __init__(self, center, radius, color, specular=-1, reflective=0.0):
        if radius <= 0:
            raise ValueError("Sphere radius must be positive, got {}".format(radius))
        if not 0.0 <= reflective <= 1.0:
            raise ValueError("Sphere reflectivity must be in [0, 1], got {}".format(reflective))

        self.center = np.array(center, dtype=np.float64)
        self.radius = float(radius)
        self.color = Color(*(int(c) for c in color))
        self.specular = int(specular)
        self.reflective = float(reflective)

    def intersect(self, ray_origin, ray_direction):
        """Return the two parametric hits of the ray with this sphere."""
        return intersect_ray_sphere(
            np.asarray(ray_origin, dtype=np.float64),
            np.asarray(ray_direction, dtype=np.float64),
            self.center, self.radius,
        )

    def __repr__(self):
        return "Sphere(center={}, radius={}, color={}, specular={}, reflective={})".format(
            self.center.tolist(), self.radius, tuple(self.color), self.specular, self.reflective)
