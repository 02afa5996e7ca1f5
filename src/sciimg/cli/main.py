from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from sciimg.api.model_io import load_camera_model, save_camera_model
from sciimg.camera.base import ImageCoordinate
from sciimg.config import SolverConfig, parse_solver_config
from sciimg.core.vector import Vector
from sciimg.exceptions import CameraModelError, ValidationError


def _load_config(path: Path | None) -> SolverConfig | None:
    if path is None:
        return None
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValidationError(f"{path} must contain a JSON object")
    return parse_solver_config(data)


def _info(model_path: Path) -> dict:
    model = load_camera_model(model_path)
    m = model.model
    return {
        "model_type": model.model_type.value,
        "f": model.f(),
        "hc": m.hc(),
        "vc": m.vc(),
        "pixel_angle_horiz": model.pixel_angle_horiz(),
        "pixel_angle_vert": model.pixel_angle_vert(),
        "serialized": model.serialize(),
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="sciimg-camera")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("--solver-config", type=Path, default=None, help="JSON file with solver tolerances.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    info = sub.add_parser("info", help="Print derived parameters of a camera model file.")
    info.add_argument("model", type=Path)

    proj = sub.add_parser("project", help="Project object-space points to (line, sample).")
    proj.add_argument("model", type=Path)
    proj.add_argument("--xyz", type=float, nargs=3, action="append", required=True, metavar=("X", "Y", "Z"))
    proj.add_argument("--infinity", action="store_true", help="Treat points as directions.")

    unproj = sub.add_parser("unproject", help="Back-project pixels to look vectors.")
    unproj.add_argument("model", type=Path)
    unproj.add_argument("--ls", type=float, nargs=2, action="append", required=True, metavar=("LINE", "SAMPLE"))

    lin = sub.add_parser("linearize", help="Fit a linear CAHV model over an image frame.")
    lin.add_argument("model", type=Path)
    lin.add_argument("--source", type=int, nargs=2, required=True, metavar=("WIDTH", "HEIGHT"))
    lin.add_argument("--target", type=int, nargs=2, default=None, metavar=("WIDTH", "HEIGHT"))
    lin.add_argument("--policy", type=str, default="tightest", choices=["tightest", "widest"])
    lin.add_argument("--out", type=Path, required=True)

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    config = _load_config(args.solver_config)

    if args.cmd == "info":
        print(json.dumps(_info(args.model), indent=2))
        return 0

    if args.cmd == "project":
        model = load_camera_model(args.model)
        rows = []
        for x, y, z in args.xyz:
            try:
                ls = model.xyz_to_ls(Vector(x, y, z), infinity=args.infinity, config=config)
                rows.append({"xyz": [x, y, z], "line": ls.line, "sample": ls.sample})
            except CameraModelError as exc:
                rows.append({"xyz": [x, y, z], "error": str(exc)})
        print(json.dumps(rows, indent=2))
        return 0 if all("error" not in r for r in rows) else 1

    if args.cmd == "unproject":
        model = load_camera_model(args.model)
        rows = []
        for line, sample in args.ls:
            try:
                lv = model.ls_to_look_vector(ImageCoordinate(line=line, sample=sample), config=config)
                rows.append(
                    {
                        "line": line,
                        "sample": sample,
                        "origin": list(lv.origin.to_tuple()),
                        "direction": list(lv.direction.to_tuple()),
                    }
                )
            except CameraModelError as exc:
                rows.append({"line": line, "sample": sample, "error": str(exc)})
        print(json.dumps(rows, indent=2))
        return 0 if all("error" not in r for r in rows) else 1

    if args.cmd == "linearize":
        model = load_camera_model(args.model)
        sw, sh = args.source
        tw, th = args.target if args.target is not None else args.source
        cahv = model.linearize(sw, sh, tw, th, fov_policy=args.policy, config=config)
        save_camera_model(args.out, cahv)
        print(f"Wrote {args.out}")
        return 0

    raise AssertionError(f"Unhandled cmd: {args.cmd}")


if __name__ == "__main__":
    sys.exit(main())
