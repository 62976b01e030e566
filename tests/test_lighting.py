import numpy as np
import pytest

from camera import Camera
from light import AmbientLight, DirectionalLight, PointLight
from ray_tracer import compute_lighting
from scene import Scene
from surfaces.sphere import Sphere
from vectors import vec3

# Shaded point: the near pole of a sphere centered at (0, 0, 5), seen from the origin.
POINT = vec3(0.0, 0.0, 4.0)
NORMAL = vec3(0.0, 0.0, -1.0)
VIEW = vec3(0.0, 0.0, -1.0)


def _surface():
    return Sphere((0.0, 0.0, 5.0), 1.0, (0, 0, 255), specular=-1)


def _scene(lights, occluders=()):
    return Scene(Camera((0.0, 0.0, 0.0)), (_surface(),) + tuple(occluders), lights)


def test_ambient_only():
    scene = _scene([AmbientLight(0.3)])
    assert compute_lighting(POINT, NORMAL, VIEW, scene, -1, 0) == pytest.approx(0.3)


def test_diffuse_from_point_light():
    """Light straight along the normal contributes its full intensity."""
    scene = _scene([AmbientLight(0.2), PointLight(0.6, (0.0, 0.0, 0.0))])
    assert compute_lighting(POINT, NORMAL, VIEW, scene, -1, 0) == pytest.approx(0.8)


def test_diffuse_uses_cosine():
    """An oblique light vector scales diffuse by cos(angle)."""
    scene = _scene([DirectionalLight(1.0, (0.0, 1.0, -1.0))])
    assert compute_lighting(POINT, NORMAL, VIEW, scene, -1, 0) == pytest.approx(np.sqrt(0.5))


def test_light_behind_surface_contributes_nothing():
    scene = _scene([AmbientLight(0.1), DirectionalLight(1.0, (0.0, 0.0, 1.0))])
    assert compute_lighting(POINT, NORMAL, VIEW, scene, 10, 0) == pytest.approx(0.1)


def test_specular_adds_highlight_and_is_not_clamped():
    """Mirror-aligned view adds the full specular term on top of diffuse."""
    scene = _scene([AmbientLight(0.2), PointLight(0.6, (0.0, 0.0, 0.0))])
    intensity = compute_lighting(POINT, NORMAL, VIEW, scene, 10, 0)
    assert intensity == pytest.approx(1.4)


def test_negative_specular_disables_highlight():
    scene = _scene([PointLight(0.6, (0.0, 0.0, 0.0))])
    assert compute_lighting(POINT, NORMAL, VIEW, scene, -1, 0) == pytest.approx(0.6)

# --- Shadows ---

def test_occluder_blocks_point_light_keeps_ambient():
    """A sphere between the point and the light removes diffuse and specular."""
    blocker = Sphere((0.0, 0.0, 2.0), 0.5, (255, 255, 255))
    lights = [AmbientLight(0.2), PointLight(0.6, (0.0, 0.0, 0.0))]

    lit = compute_lighting(POINT, NORMAL, VIEW, _scene(lights), 10, 0)
    shadowed = compute_lighting(POINT, NORMAL, VIEW, _scene(lights, [blocker]), 10, 0)

    assert lit == pytest.approx(1.4)
    assert shadowed == pytest.approx(0.2)


def test_sphere_beyond_point_light_casts_no_shadow():
    """Point-light shadow rays stop at the light (t_max = 1)."""
    beyond = Sphere((0.0, 0.0, -10.0), 1.0, (255, 255, 255))
    scene = _scene([PointLight(0.6, (0.0, 0.0, 0.0))], [beyond])
    assert compute_lighting(POINT, NORMAL, VIEW, scene, -1, 0) == pytest.approx(0.6)


def test_directional_shadow_is_unbounded():
    """The same far sphere does block a directional light."""
    beyond = Sphere((0.0, 0.0, -10.0), 1.0, (255, 255, 255))
    scene = _scene([AmbientLight(0.2), DirectionalLight(0.6, (0.0, 0.0, -1.0))], [beyond])
    assert compute_lighting(POINT, NORMAL, VIEW, scene, -1, 0) == pytest.approx(0.2)


def test_roots_at_surface_do_not_self_shadow():
    """Roots at t ~ 0 fall under EPSILON, so the shading sphere never blocks itself there."""
    scene = _scene([AmbientLight(0.2), PointLight(0.6, (0.0, 0.0, 0.0))])
    with_self = compute_lighting(POINT, NORMAL, VIEW, scene, -1, -1)
    without_self = compute_lighting(POINT, NORMAL, VIEW, scene, -1, 0)
    assert with_self == pytest.approx(0.8)
    assert without_self == pytest.approx(0.8)


def test_negative_light_intensity_rejected():
    with pytest.raises(ValueError):
        PointLight(-0.1, (0.0, 0.0, 0.0))


def test_ambient_light_has_no_direction():
    """Ambient light reaches every point, so it has no light vector to shadow-test."""
    with pytest.raises(NotImplementedError):
        AmbientLight(0.2).light_vector(POINT)
