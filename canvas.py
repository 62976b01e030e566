import numpy as np
from PIL import Image

from vectors import Color, clamp


class Canvas:
    """
    Row-major RGB pixel buffer addressed in canvas coordinates.

    Canvas coordinates put the origin at the center with y pointing up:
    x in [-W/2, W/2), y in [-H/2, H/2). Row 0 of the buffer is the top row.
    """

    def __init__(self, width, height, background_color=(255, 255, 255)):
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width, 3), dtype=np.uint8)
        bg = clamp(Color(*background_color))
        self.pixels[:, :] = (bg.r, bg.g, bg.b)

    def _to_buffer(self, x, y):
        # Top canvas row is y = H - H//2 - 1
        return self.width // 2 + x, self.height - self.height // 2 - 1 - y

    def _in_range(self, col, row):
        return 0 <= col < self.width and 0 <= row < self.height

    def put_pixel(self, x, y, color):
        """Write a color at canvas position (x, y). Writes outside the canvas are dropped."""
        col, row = self._to_buffer(x, y)
        if self._in_range(col, row):
            c = clamp(color)
            self.pixels[row, col] = (c.r, c.g, c.b)

    def get_pixel(self, x, y):
        col, row = self._to_buffer(x, y)
        if not self._in_range(col, row):
            raise ValueError("Pixel ({}, {}) is outside the {}x{} canvas".format(x, y, self.width, self.height))
        r, g, b = self.pixels[row, col]
        return Color(int(b), int(g), int(r))

    def to_image(self):
        return Image.fromarray(self.pixels)

    def save(self, output_path):
        self.to_image().save(output_path)
