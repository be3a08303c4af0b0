#!/usr/bin/env python3
"""Render a scene of spheres with the Whitted ray tracer.

This script renders a preset or JSON scene file with progressive refinement
and writes the result as an ASCII PPM or a PNG, depending on the output
suffix. The output directory is created if it does not exist.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH       Image width in pixels (default: 400)
    --height HEIGHT     Image height in pixels (default: 200)
    --samples SAMPLES   Number of samples per pixel (default: 16)
    --depth DEPTH       Bounce budget of the recursive mode (default: 5)
    --seed SEED         Seed of the per-pixel jitter (default: 42)
    --mode MODE         normals, shadows or recursive (default: recursive)
    --scene SCENE       Preset name or path to a JSON scene (default: showcase)
    --output OUTPUT     Output file path (default: outputs/spheres.ppm)
    --batch-size SIZE   Samples per progress update (default: 4)
    --show              Display the result in a Matplotlib window
    --quiet             Suppress progress output

Example:
    python -m examples.render_spheres --mode normals --scene basic --output outputs/normal.ppm
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
        description="Render a scene of spheres.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=200,
        help="Image height in pixels (default: 200)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=16,
        help="Number of samples per pixel (default: 16)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=5,
        help="Bounce budget of the recursive mode (default: 5)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Seed of the per-pixel jitter (default: 42)",
    )
    parser.add_argument(
        "--mode",
        choices=["normals", "shadows", "recursive"],
        default="recursive",
        help="Shading mode (default: recursive)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default="showcase",
        help="Preset name (basic, shadow, showcase) or path to a JSON scene (default: showcase)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="outputs/spheres.ppm",
        help="Output file path, .ppm or .png (default: outputs/spheres.ppm)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=4,
        help="Samples per progress update (default: 4)",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Display the result in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_spheres(
    width: int = 400,
    height: int = 200,
    num_samples: int = 16,
    max_depth: int = 5,
    seed: int = 42,
    mode: str = "recursive",
    scene_name: str = "showcase",
    output_path: str = "outputs/spheres.ppm",
    batch_size: int = 4,
    show: bool = False,
    quiet: bool = False,
) -> Path:
    """Render a scene and save it to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        num_samples: Number of samples per pixel.
        max_depth: Bounce budget of the recursive mode.
        seed: Seed of the per-pixel jitter.
        mode: Shading mode name.
        scene_name: Preset name or path to a JSON scene file.
        output_path: Output file path (.ppm or .png).
        batch_size: Number of samples to render between progress updates.
        show: If True, display the result with Matplotlib.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from whitted.camera.pinhole import PinholeCamera, setup_camera
    from whitted.core.progressive import ProgressiveRenderer
    from whitted.core.shading import ShadingMode
    from whitted.preview.display import show_preview
    from whitted.scene.manager import SceneManager
    from whitted.scene.model import load_scene
    from whitted.scene.presets import PRESETS, get_preset

    if scene_name in PRESETS:
        scene = get_preset(scene_name)
    else:
        scene = load_scene(scene_name)

    if not quiet:
        print(
            f"Loading scene '{scene_name}' ({len(scene.spheres)} spheres, "
            f"{len(scene.lights)} lights) at {width}x{height}..."
        )

    manager = SceneManager()
    manager.load(scene)
    setup_camera(PinholeCamera(aspect_ratio=width / height))

    renderer = ProgressiveRenderer(
        width,
        height,
        mode=ShadingMode[mode.upper()],
        max_depth=max_depth,
        seed=seed,
    )

    if not quiet:
        print(f"Rendering {num_samples} samples per pixel ({mode}, depth {max_depth})...")

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
            )

    renderer.render(
        num_samples=num_samples,
        batch_size=batch_size,
        callback=progress_callback,
    )

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    renderer.save_image(str(output_file))

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if show:
        show_preview(renderer.get_image_numpy(), title=f"{scene_name} ({mode})")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_spheres(
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            max_depth=args.depth,
            seed=args.seed,
            mode=args.mode,
            scene_name=args.scene,
            output_path=args.output,
            batch_size=args.batch_size,
            show=args.show,
            quiet=args.quiet,
        )
        return 0
    except (OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
