#!/usr/bin/env python3
"""Render one of the sphere scene presets.

This script demonstrates end-to-end rendering with lufasu. It builds a preset
scene, sets up its camera, renders the image in bands of rows and writes a
gamma-encoded PNG.

Usage:
    python examples/render_spheres.py [options]

Options:
    --scene NAME            Scene preset: two_spheres or material_showcase
                            (default: two_spheres)
    --width WIDTH           Image width in pixels (default: 800)
    --height HEIGHT         Image height in pixels (default: 400)
    --samples SAMPLES       Number of samples per pixel (default: 100)
    --max-bounces N         Bounce limit per path (default: 50)
    --seed SEED             Render seed (default: 0)
    --shading MODE          path or normals (default: path)
    --rows-per-batch ROWS   Rows per progress update (default: 16)
    --gamma GAMMA           Output gamma (default: 2.2)
    --output OUTPUT         Output file path (default: spheres.png)
    --arch ARCH             Taichi backend: gpu or cpu (default: try gpu)
    --quiet                 Suppress progress output

Example:
    python examples/render_spheres.py --scene material_showcase --samples 50
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene with the lufasu path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=["two_spheres", "material_showcase"],
        default="two_spheres",
        help="Scene preset (default: two_spheres)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=800,
        help="Image width in pixels (default: 800)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=400,
        help="Image height in pixels (default: 400)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--max-bounces",
        type=int,
        default=50,
        help="Bounce limit per path (default: 50)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Render seed (default: 0)",
    )
    parser.add_argument(
        "--shading",
        choices=["path", "normals"],
        default="path",
        help="Shading mode (default: path)",
    )
    parser.add_argument(
        "--rows-per-batch",
        type=int,
        default=16,
        help="Rows per progress update (default: 16)",
    )
    parser.add_argument(
        "--gamma",
        type=float,
        default=2.2,
        help="Output gamma (default: 2.2)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="spheres.png",
        help="Output file path (default: spheres.png)",
    )
    parser.add_argument(
        "--arch",
        choices=["gpu", "cpu"],
        default=None,
        help="Taichi backend (default: try GPU, fall back to CPU)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_spheres(
    scene_name: str = "two_spheres",
    width: int = 800,
    height: int = 400,
    num_samples: int = 100,
    max_bounces: int = 50,
    seed: int = 0,
    shading: str = "path",
    rows_per_batch: int = 16,
    gamma: float = 2.2,
    output_path: str = "spheres.png",
    quiet: bool = False,
) -> Path:
    """Render a scene preset and save it to file.

    Args:
        scene_name: Key into SCENE_PRESETS.
        width: Image width in pixels.
        height: Image height in pixels.
        num_samples: Number of samples per pixel.
        max_bounces: Bounce limit per path.
        seed: Render seed.
        shading: "path" or "normals".
        rows_per_batch: Rows rendered between progress updates.
        gamma: Output gamma.
        output_path: Output file path (PNG).
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from lufasu.camera.thin_lens import setup_camera
    from lufasu.core.renderer import Renderer, RenderSettings
    from lufasu.preview.export import save_png
    from lufasu.scene.presets import SCENE_PRESETS

    if not quiet:
        print(f"Creating {scene_name} scene ({width}x{height})...")

    scene, camera = SCENE_PRESETS[scene_name](aspect_ratio=width / height)
    setup_camera(camera)

    settings = RenderSettings(
        samples_per_pixel=num_samples,
        max_bounces=max_bounces,
        seed=seed,
        shading=shading,
        rows_per_batch=rows_per_batch,
    )
    renderer = Renderer(width, height, settings)

    if not quiet:
        print(f"Rendering {scene.get_sphere_count()} spheres at {num_samples} samples per pixel...")

    start_time = time.time()

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (rows_done / total_rows) * 100 if total_rows > 0 else 0
            rows_per_sec = rows_done / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {rows_done}/{total_rows} rows "
                f"({progress_pct:.1f}%) - {rows_per_sec:.1f} rows/s",
                end="",
                flush=True,
            )

    renderer.render(callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    save_png(renderer, str(output_file), gamma=gamma)

    total_time = time.time() - start_time
    if not quiet:
        pixel_count = width * height
        print(f"Saved to: {output_file.absolute()}")
        print(f"Rendered in {total_time:.2f}s ({total_time / pixel_count * 1e6:.2f}us per pixel)")

    return output_file


def init_taichi(arch: str | None, quiet: bool) -> None:
    """Initialize Taichi on the requested backend, or GPU then CPU."""
    if arch == "cpu":
        ti.init(arch=ti.cpu)
    elif arch == "gpu":
        ti.init(arch=ti.gpu)
    else:
        try:
            ti.init(arch=ti.gpu)
            if not quiet:
                print("Using GPU backend")
        except Exception:
            ti.init(arch=ti.cpu)
            if not quiet:
                print("Using CPU backend")


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    init_taichi(args.arch, args.quiet)

    try:
        render_spheres(
            scene_name=args.scene,
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            max_bounces=args.max_bounces,
            seed=args.seed,
            shading=args.shading,
            rows_per_batch=args.rows_per_batch,
            gamma=args.gamma,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
