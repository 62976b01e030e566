import numpy as np

from camera import Camera
from scene_settings import SceneSettings


class Scene:
    """
    Read-only description of everything a render pass needs.

    Sphere centers and radii are packed into contiguous arrays once, so the
    JIT-compiled intersection loops can scan them without touching Python
    objects.
    """

    def __init__(self, camera, spheres, lights, settings=None):
        self.camera = camera if camera is not None else Camera((0, 0, 0))
        self.spheres = tuple(spheres)
        self.lights = tuple(lights)
        self.settings = settings if settings is not None else SceneSettings()

        self.sphere_centers = np.zeros((len(self.spheres), 3), dtype=np.float64)
        self.sphere_radii = np.zeros(len(self.spheres), dtype=np.float64)
        for idx, sphere in enumerate(self.spheres):
            self.sphere_centers[idx] = sphere.center
            self.sphere_radii[idx] = sphere.radius

    @property
    def background_color(self):
        return self.settings.background_color

    @property
    def max_recursions(self):
        return self.settings.max_recursions

    def with_camera(self, camera):
        """Return a new scene sharing spheres, lights and settings but viewed from `camera`."""
        return Scene(camera, self.spheres, self.lights, self.settings)
