from vectors import Color


class SceneSettings:
    def __init__(self, background_color=(255, 255, 255), max_recursions=3):
        self.background_color = Color(*(int(c) for c in background_color))
        self.max_recursions = int(max_recursions)
