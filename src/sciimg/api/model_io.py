from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from sciimg.camera.base import ModelType, PupilType
from sciimg.camera.cahv import Cahv
from sciimg.camera.cahvor import Cahvor
from sciimg.camera.cahvore import Cahvore
from sciimg.camera.model import AnyCameraModel, CameraModel, unwrap_model
from sciimg.core.vector import Vector
from sciimg.exceptions import ValidationError

SCHEMA_VERSION = "sciimg.camera_model.v0"

_FIELDS: dict[ModelType, tuple[str, ...]] = {
    ModelType.CAHV: ("c", "a", "h", "v"),
    ModelType.CAHVOR: ("c", "a", "h", "v", "o", "r"),
    ModelType.CAHVORE: ("c", "a", "h", "v", "o", "r", "e"),
}


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ValidationError(msg)


def _parse_float(text: Any, what: str) -> float:
    try:
        return float(text)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{what} must be a number, got {text!r}") from exc


def _build(model_type: ModelType, vectors: dict[str, Vector], linearity: float | None, pupil_type: PupilType | None) -> AnyCameraModel:
    if model_type is ModelType.CAHV:
        return Cahv(**vectors)
    if model_type is ModelType.CAHVOR:
        return Cahvor(**vectors)
    _require(linearity is not None, "CAHVORE model requires a linearity")
    return Cahvore(
        **vectors,
        linearity=linearity,
        pupil_type=pupil_type if pupil_type is not None else PupilType.from_linearity(linearity),
    )


def deserialize(text: str) -> CameraModel:
    """
    Parse the semicolon-delimited form written by `serialize()`.

    The variant follows from the field count: 4 triples (CAHV), 6 triples
    (CAHVOR), or 7 triples plus a linearity value (CAHVORE).
    """
    parts = [p.strip() for p in text.strip().split(";")]
    if len(parts) == 4:
        model_type = ModelType.CAHV
    elif len(parts) == 6:
        model_type = ModelType.CAHVOR
    elif len(parts) == 8:
        model_type = ModelType.CAHVORE
    else:
        raise ValidationError(f"cannot infer camera model from {len(parts)} fields")

    names = _FIELDS[model_type]
    vectors = {name: Vector.parse_triple(part) for name, part in zip(names, parts)}
    linearity = _parse_float(parts[7], "linearity") if model_type is ModelType.CAHVORE else None
    return CameraModel(_build(model_type, vectors, linearity, None))


def model_to_dict(model: CameraModel | AnyCameraModel) -> dict[str, Any]:
    m = unwrap_model(model)
    out: dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "model_type": m.model_type.value,
    }
    for name in _FIELDS[m.model_type]:
        out[name] = getattr(m, name).format_triple()
    if isinstance(m, Cahvore):
        out["linearity"] = float(m.linearity)
        out["pupil_type"] = m.pupil_type.value
    return out


def model_from_dict(data: dict[str, Any]) -> CameraModel:
    _require(data.get("schema_version") == SCHEMA_VERSION, f"schema_version must be {SCHEMA_VERSION}")
    raw_type = data.get("model_type")
    try:
        model_type = ModelType(str(raw_type).upper())
    except ValueError as exc:
        raise ValidationError(f"unknown model_type: {raw_type!r}") from exc

    vectors: dict[str, Vector] = {}
    for name in _FIELDS[model_type]:
        raw = data.get(name)
        _require(isinstance(raw, str), f"{model_type.value} model requires '{name}' as an '(x,y,z)' string")
        vectors[name] = Vector.parse_triple(raw)

    linearity = None
    pupil_type = None
    if model_type is ModelType.CAHVORE:
        _require("linearity" in data, "CAHVORE model requires 'linearity'")
        linearity = _parse_float(data["linearity"], "linearity")
        if "pupil_type" in data:
            try:
                pupil_type = PupilType(data["pupil_type"])
            except ValueError as exc:
                raise ValidationError(f"unknown pupil_type: {data['pupil_type']!r}") from exc

    return CameraModel(_build(model_type, vectors, linearity, pupil_type))


def save_camera_model(path: Path, model: CameraModel | AnyCameraModel) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(model_to_dict(model), indent=2, sort_keys=True), encoding="utf-8")
    return path


def load_camera_model(path: Path) -> CameraModel:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValidationError(f"{path} is not valid JSON: {exc}") from exc
    _require(isinstance(data, dict), f"{path} must contain a JSON object")
    return model_from_dict(data)
