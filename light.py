from enum import IntEnum

import numpy as np


class LightType(IntEnum):
    AMBIENT = 0
    POINT = 1
    DIRECTIONAL = 2


class Light:
    light_type = None

    def __init__(self, intensity):
        if intensity < 0:
            raise ValueError("Light intensity must be non-negative, got {}".format(intensity))
        self.intensity = float(intensity)

    def light_vector(self, point):
        """
        Return (L, t_max) for a surface point: the vector toward the light
        and the largest shadow-ray parameter that still lies before it.
        """
        raise NotImplementedError


class AmbientLight(Light):
    light_type = LightType.AMBIENT

    def __repr__(self):
        return "AmbientLight(intensity={})".format(self.intensity)


class PointLight(Light):
    light_type = LightType.POINT

    def __init__(self, intensity, position):
        super().__init__(intensity)
        self.position = np.array(position, dtype=np.float64)

    def light_vector(self, point):
        # The light sits at t = 1 along L.
        return self.position - point, 1.0

    def __repr__(self):
        return "PointLight(intensity={}, position={})".format(self.intensity, self.position.tolist())


class DirectionalLight(Light):
    light_type = LightType.DIRECTIONAL

    def __init__(self, intensity, direction):
        super().__init__(intensity)
        self.direction = np.array(direction, dtype=np.float64)

    def light_vector(self, point):
        return self.direction, np.inf

    def __repr__(self):
        return "DirectionalLight(intensity={}, direction={})".format(self.intensity, self.direction.tolist())
