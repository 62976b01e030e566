import numpy as np

from vectors import multiply_mv


def rotation_y(degrees):
    """Rotation about the vertical axis, in the row layout used by Camera."""
    theta = np.radians(degrees)
    c = np.cos(theta)
    s = np.sin(theta)
    return np.array([
        [c, 0.0, -s],
        [0.0, 1.0, 0.0],
        [s, 0.0, c],
    ], dtype=np.float64)


class Camera:
    def __init__(self, position, rotation=None):
        self.position = np.array(position, dtype=np.float64)
        if rotation is None:
            rotation = np.eye(3)
        self.rotation = np.array(rotation, dtype=np.float64).reshape(3, 3)

    def moved(self, offset):
        """Return a copy of the camera translated by `offset`."""
        return Camera(self.position + np.asarray(offset, dtype=np.float64), self.rotation)

    @staticmethod
    def canvas_to_viewport(x, y, canvas_width, canvas_height):
        """Map a pixel offset from the canvas center onto the projection plane at z = 1."""
        return np.array([x / canvas_width, y / canvas_height, 1.0], dtype=np.float64)

    def generate_ray(self, x, y, canvas_width, canvas_height):
        """Generate a world-space ray through pixel (x, y). The direction is not normalized."""
        direction = self.canvas_to_viewport(x, y, canvas_width, canvas_height)
        direction = multiply_mv(self.rotation, direction)
        return self.position, direction
