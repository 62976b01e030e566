import argparse
import multiprocessing as mp
import os
import sys
import time
from multiprocessing.pool import ThreadPool

import numpy as np
from numba import njit

from camera import Camera, rotation_y
from canvas import Canvas
from light import AmbientLight, DirectionalLight, Light, LightType, PointLight
from scene import Scene
from scene_settings import SceneSettings
from surfaces.sphere import Sphere, intersect_ray_sphere
from vectors import (clamp, color_add, color_multiply, dot, length, normalize,
                     reflect_ray)


# Minimum shadow/reflection ray parameter, keeps a surface from shadowing itself
EPSILON = 0.001


# =============================================================================
# Numba JIT-compiled helper functions for hot paths
# =============================================================================

@njit(cache=True, nogil=True)
def _closest_intersection_jit(ray_origin, ray_direction, t_min, t_max,
                              sphere_centers, sphere_radii, exclude):
    """
    Scan all spheres for the closest root strictly inside (t_min, t_max).

    exclude: index of a sphere to skip, -1 for none

    Returns (t, sphere_index), with sphere_index -1 when nothing qualifies.
    """
    closest_t = np.inf
    closest_idx = -1

    for i in range(sphere_radii.shape[0]):
        if i == exclude:
            continue

        t1, t2 = intersect_ray_sphere(ray_origin, ray_direction,
                                      sphere_centers[i], sphere_radii[i])

        if t_min < t1 < t_max and t1 < closest_t:
            closest_t = t1
            closest_idx = i
        if t_min < t2 < t_max and t2 < closest_t:
            closest_t = t2
            closest_idx = i

    return closest_t, closest_idx


@njit(cache=True, nogil=True)
def _is_occluded_jit(point, light_vector, t_max, sphere_centers, sphere_radii, exclude):
    """True if any sphere other than `exclude` has a root in (EPSILON, t_max)."""
    for i in range(sphere_radii.shape[0]):
        if i == exclude:
            continue

        t1, t2 = intersect_ray_sphere(point, light_vector,
                                      sphere_centers[i], sphere_radii[i])

        if EPSILON < t1 < t_max or EPSILON < t2 < t_max:
            return True

    return False


# =============================================================================
# Scene file parsing
# =============================================================================

def _expect(obj_type, params, *counts):
    if len(params) not in counts:
        raise ValueError("'{}' expects {} values, got {}".format(
            obj_type, " or ".join(str(c) for c in counts), len(params)))


def parse_scene_file(file_path):
    """Parse the scene file and return camera, settings, and scene objects."""
    objects = []
    camera = None
    scene_settings = None

    with open(file_path, 'r') as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            parts = line.split()
            obj_type = parts[0]
            params = [float(p) for p in parts[1:]]

            if obj_type == "cam":
                _expect(obj_type, params, 3, 4, 12)
                if len(params) == 4:
                    rotation = rotation_y(params[3])
                elif len(params) == 12:
                    rotation = params[3:]
                else:
                    rotation = None
                camera = Camera(params[:3], rotation)
            elif obj_type == "set":
                _expect(obj_type, params, 4)
                scene_settings = SceneSettings(params[:3], params[3])
            elif obj_type == "sph":
                _expect(obj_type, params, 9)
                sphere = Sphere(params[:3], params[3], params[4:7], int(params[7]), params[8])
                objects.append(sphere)
            elif obj_type == "amb":
                _expect(obj_type, params, 1)
                objects.append(AmbientLight(params[0]))
            elif obj_type == "pnt":
                _expect(obj_type, params, 4)
                objects.append(PointLight(params[0], params[1:4]))
            elif obj_type == "dir":
                _expect(obj_type, params, 4)
                objects.append(DirectionalLight(params[0], params[1:4]))
            else:
                raise ValueError("Unknown object type: {}".format(obj_type))

    return camera, scene_settings, objects


def separate_objects(objects):
    """Separate parsed objects into spheres and lights."""
    spheres = []
    lights = []

    for obj in objects:
        if isinstance(obj, Sphere):
            spheres.append(obj)
        elif isinstance(obj, Light):
            lights.append(obj)

    return spheres, lights


def load_scene(file_path):
    """Parse a scene file straight into a Scene."""
    camera, scene_settings, objects = parse_scene_file(file_path)
    spheres, lights = separate_objects(objects)
    return Scene(camera, spheres, lights, scene_settings)


# =============================================================================
# Shading and tracing
# =============================================================================

def find_nearest_intersection(ray_origin, ray_direction, t_min, t_max, scene, exclude=-1):
    """
    Find the nearest sphere hit along the ray within (t_min, t_max).

    Returns:
        (t, sphere_index) if intersection found
        (inf, -1) if no intersection
    """
    return _closest_intersection_jit(
        ray_origin, ray_direction, float(t_min), float(t_max),
        scene.sphere_centers, scene.sphere_radii, exclude,
    )


def compute_lighting(point, normal, view, scene, specular, exclude=-1):
    """
    Compute the light intensity reaching a surface point.

    Ambient light always contributes. Point and directional lights add a
    diffuse term and, when `specular` is non-negative, a Phong specular term,
    unless some sphere other than `exclude` blocks the shadow ray.
    The result is not clamped.
    """
    intensity = 0.0
    normal_length = length(normal)
    view_length = length(view)

    for light in scene.lights:
        if light.light_type == LightType.AMBIENT:
            intensity += light.intensity
            continue

        light_vec, t_max = light.light_vector(point)

        if _is_occluded_jit(point, light_vec, t_max,
                            scene.sphere_centers, scene.sphere_radii, exclude):
            continue

        # Diffuse
        n_dot_l = dot(normal, light_vec)
        if n_dot_l > 0:
            intensity += light.intensity * n_dot_l / (normal_length * length(light_vec))

        # Specular
        if specular >= 0:
            reflected = reflect_ray(light_vec, normal)
            r_dot_v = dot(reflected, view)
            if r_dot_v > 0:
                intensity += light.intensity * (r_dot_v / (length(reflected) * view_length)) ** specular

    return intensity


def trace_ray(ray_origin, ray_direction, t_min, t_max, scene, depth, exclude=-1):
    """
    Trace a ray through the scene and return its unclamped color.

    exclude: index of the sphere the ray leaves from, -1 for none
    """
    ray_origin = np.asarray(ray_origin, dtype=np.float64)
    ray_direction = np.asarray(ray_direction, dtype=np.float64)

    closest_t, sphere_idx = find_nearest_intersection(
        ray_origin, ray_direction, t_min, t_max, scene, exclude)

    if sphere_idx < 0:
        return scene.background_color

    sphere = scene.spheres[sphere_idx]

    hit_point = ray_origin + closest_t * ray_direction
    normal = normalize(hit_point - sphere.center)
    view = -ray_direction

    intensity = compute_lighting(hit_point, normal, view, scene, sphere.specular, sphere_idx)
    local_color = color_multiply(intensity, sphere.color)

    reflective = sphere.reflective
    if reflective <= 0 or depth <= 0:
        return local_color

    reflected_dir = reflect_ray(view, normal)
    reflected_color = trace_ray(hit_point, reflected_dir, EPSILON, np.inf,
                                scene, depth - 1, sphere_idx)

    return color_add(color_multiply(1 - reflective, local_color),
                     color_multiply(reflective, reflected_color))


# =============================================================================
# Frame driver
# =============================================================================

def split_rows(height, num_workers):
    """
    Partition canvas rows [-height/2, height/2) into num_workers contiguous
    bands. The last band absorbs the remainder.
    """
    band_height = height // num_workers
    y_min = -(height // 2)
    y_max = y_min + height

    bands = []
    for i in range(num_workers):
        y_start = y_min + i * band_height
        y_end = y_start + band_height
        if i == num_workers - 1:
            y_end = y_max
        bands.append((y_start, y_end))
    return bands


def _render_row_band(args):
    """Render canvas rows [y_start, y_end) into the shared canvas."""
    y_start, y_end, scene, canvas, max_depth = args
    width = canvas.width
    height = canvas.height
    camera = scene.camera
    x_min = -(width // 2)

    for y in range(y_start, y_end):
        for x in range(x_min, x_min + width):
            origin, direction = camera.generate_ray(x, y, width, height)
            color = trace_ray(origin, direction, 1.0, np.inf, scene, max_depth)
            canvas.put_pixel(x, y, clamp(color))

    return y_start, y_end


def render(scene, width, height, max_depth=None, verbose=True):
    """
    Render the scene on the calling thread (sequential version).
    """
    if max_depth is None:
        max_depth = scene.max_recursions

    canvas = Canvas(width, height, scene.background_color)
    if verbose:
        print(f"Max depth: {max_depth}, Spheres: {len(scene.spheres)}, Lights: {len(scene.lights)}")

    start_time = time.time()
    y_min = -(height // 2)

    for row in range(height):
        row_start = time.time()
        y = y_min + row
        _render_row_band((y, y + 1, scene, canvas, max_depth))

        # Progress indicator every 10 rows
        if verbose and ((row + 1) % 10 == 0 or row == height - 1):
            elapsed = time.time() - start_time
            progress = (row + 1) / height
            eta = (elapsed / progress) * (1 - progress)
            row_time = time.time() - row_start
            print(f"Row {row+1}/{height} ({progress*100:.1f}%) - Row time: {row_time:.2f}s - ETA: {eta:.0f}s")
            sys.stdout.flush()

    if verbose:
        print(f"Rendering complete in {time.time() - start_time:.1f}s")

    return canvas


def render_parallel(scene, width, height, num_workers=None, max_depth=None, verbose=True):
    """
    Render the scene with a fork-join pass over row bands.

    Args:
        num_workers: number of worker threads (default: CPU count)
    """
    if num_workers is None:
        num_workers = mp.cpu_count()
    if max_depth is None:
        max_depth = scene.max_recursions

    start_time = time.time()
    canvas = Canvas(width, height, scene.background_color)

    if verbose:
        print(f"Max depth: {max_depth}, Spheres: {len(scene.spheres)}, Lights: {len(scene.lights)}")
        print(f"Parallel rendering {width}x{height} with {num_workers} workers...")

    # Bands are disjoint, so workers write the canvas without locking
    bands = [(y_start, y_end, scene, canvas, max_depth)
             for y_start, y_end in split_rows(height, num_workers)]

    if verbose:
        print(f"Divided into {len(bands)} bands of ~{height // num_workers} rows each")

    pool_start = time.time()
    with ThreadPool(num_workers) as pool:
        pool.map(_render_row_band, bands)

    if verbose:
        print(f"All bands completed in {time.time() - pool_start:.2f}s")
        print(f"Parallel rendering complete in {time.time() - start_time:.1f}s")

    return canvas


def render_frames(scene, width, height, num_frames, camera_step=(0.0, 0.0, 0.0),
                  num_workers=None, max_depth=None, verbose=True):
    """
    Yield one canvas per frame, moving the camera by `camera_step` between
    frames. Every frame is an independent render pass.
    """
    step = np.asarray(camera_step, dtype=np.float64)
    for frame in range(num_frames):
        frame_scene = scene.with_camera(scene.camera.moved(step * frame))
        if verbose:
            print(f"Frame {frame+1}/{num_frames}, camera at {frame_scene.camera.position}")
        yield render_parallel(frame_scene, width, height, num_workers, max_depth, verbose)


def save_image(canvas, output_path):
    """Save the rendered canvas to a file."""
    canvas.save(output_path)
    print(f"Image saved to {output_path}")


def frame_path(output_path, index):
    stem, suffix = os.path.splitext(output_path)
    return f"{stem}_{index:04d}{suffix}"


def main(argv=None):
    parser = argparse.ArgumentParser(description='Python Ray Tracer')
    parser.add_argument('scene_file', type=str, help='Path to the scene file')
    parser.add_argument('output_image', type=str, help='Name of the output image file')
    parser.add_argument('--width', type=int, default=600, help='Image width')
    parser.add_argument('--height', type=int, default=600, help='Image height')
    parser.add_argument('--depth', type=int, default=None,
                        help='Reflection recursion depth (default: from scene file)')
    parser.add_argument('--sequential', action='store_true',
                        help='Render on a single thread')
    parser.add_argument('--workers', type=int, default=None,
                        help='Number of worker threads (default: CPU count)')
    parser.add_argument('--frames', type=int, default=1,
                        help='Number of frames to render')
    parser.add_argument('--camera-step', type=float, nargs=3, default=(0.0, 0.0, 0.0),
                        metavar=('DX', 'DY', 'DZ'),
                        help='Camera translation between consecutive frames')
    args = parser.parse_args(argv)

    scene = load_scene(args.scene_file)

    print(f"Scene loaded: {len(scene.spheres)} spheres, {len(scene.lights)} lights")
    print(f"Rendering {args.width}x{args.height} image...")

    if args.frames > 1:
        frames = render_frames(scene, args.width, args.height, args.frames, args.camera_step,
                               args.workers, args.depth)
        for index, canvas in enumerate(frames):
            save_image(canvas, frame_path(args.output_image, index))
        return

    if args.sequential:
        print("Using sequential renderer...")
        canvas = render(scene, args.width, args.height, args.depth)
    else:
        num_workers = args.workers if args.workers else mp.cpu_count()
        print(f"Using parallel renderer with {num_workers} workers...")
        canvas = render_parallel(scene, args.width, args.height, num_workers, args.depth)

    save_image(canvas, args.output_image)


if __name__ == '__main__':
    main()
