"""CLI entry point for building a model setup from a scenario file."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import platform
import time

import numpy as np

from geosetup.errors import GeosetupError
from geosetup.io import load_scenario, resolve_output_dir, write_fields_npz, write_json
from geosetup.logging_config import setup_logging
from geosetup.scenario import build_model


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Paint phase and temperature fields for a geodynamic model setup")
    parser.add_argument("--scenario", required=True, help="JSON scenario describing grid and primitives")
    parser.add_argument("--out", default="out", help="Output root directory")
    parser.add_argument("--name", default=None, help="Output subdirectory name (default: scenario file stem)")
    parser.add_argument("--overwrite", action="store_true", help="Overwrite files in existing output directory")
    parser.add_argument("--verbose", action="store_true", help="Log every placement at DEBUG level")
    parser.add_argument("--log-file", default=None, help="Also write log records to this file")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    scenario_path = Path(args.scenario)
    try:
        config = load_scenario(scenario_path)
    except FileNotFoundError:
        parser.error(f"Scenario file not found: {scenario_path}")
    except GeosetupError as exc:
        parser.error(str(exc))

    build_start = time.perf_counter()
    try:
        model = build_model(config)
    except GeosetupError as exc:
        parser.error(str(exc))
    build_seconds = time.perf_counter() - build_start

    out_dir = resolve_output_dir(args.out, args.name or scenario_path.stem, overwrite=args.overwrite)
    write_fields_npz(out_dir / "fields.npz", model.grid, model.phase, model.temperature, topography=model.topography)

    labels, counts = np.unique(model.phase, return_counts=True)
    meta = {
        "grid_shape": list(model.grid.shape),
        "phase_counts": {str(int(label)): int(count) for label, count in zip(labels, counts)},
        "placed_counts": list(model.placed_counts),
        "temperature_min": float(np.min(model.temperature)),
        "temperature_max": float(np.max(model.temperature)),
        "has_topography": model.topography is not None,
        "build_seconds": build_seconds,
        "python_version": platform.python_version(),
        "numpy_version": np.__version__,
        "scenario": config.to_dict(),
    }
    write_json(out_dir / "meta.json", meta)

    print(f"Model setup written: {out_dir}")
    print(f"Grid {'x'.join(str(n) for n in model.grid.shape)}; primitives placed: {len(model.placed_counts)}")
    print(
        "Temperature range: "
        f"{meta['temperature_min']:.1f} .. {meta['temperature_max']:.1f} C; "
        f"phases: {', '.join(f'{k}={v}' for k, v in meta['phase_counts'].items())}"
    )
    print(f"Build time: {build_seconds:.3f} s")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
