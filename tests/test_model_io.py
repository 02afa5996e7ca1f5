import json

import pytest

from sciimg.api.model_io import (
    SCHEMA_VERSION,
    _build,
    deserialize,
    load_camera_model,
    model_from_dict,
    model_to_dict,
    save_camera_model,
)
from sciimg.camera.base import ModelType, PupilType
from sciimg.camera.cahv import Cahv
from sciimg.camera.cahvor import Cahvor
from sciimg.camera.cahvore import Cahvore
from sciimg.camera.model import CameraModel
from sciimg.core.vector import Vector
from sciimg.exceptions import ValidationError

_C = Vector(0.1, -2.25, 3.0)
_A = Vector(0.0, 0.0, 1.0)
_H = Vector(1234.5, 0.0, 640.25)
_V = Vector(0.0, 1234.5, 480.125)
_O = Vector(0.001, -0.002, 0.999997)
_R = Vector(1e-4, -0.05, 0.0123)
_E = Vector(0.01, 2.5e-3, -1e-5)


def _models():
    return [
        Cahv(c=_C, a=_A, h=_H, v=_V),
        Cahvor(c=_C, a=_A, h=_H, v=_V, o=_O, r=_R),
        Cahvore(c=_C, a=_A, h=_H, v=_V, o=_O, r=_R, e=_E, linearity=0.25, pupil_type=PupilType.GENERAL),
        Cahvore(c=_C, a=_A, h=_H, v=_V, o=_O, r=_R, e=_E, linearity=1.0, pupil_type=PupilType.PERSPECTIVE),
    ]


@pytest.mark.parametrize("model", _models())
def test_serialize_deserialize_roundtrip(model):
    text = model.serialize()
    back = deserialize(text)
    assert back == CameraModel(model)
    assert back.serialize() == text


def test_deserialize_infers_pupil_type():
    model = Cahvore(c=_C, a=_A, h=_H, v=_V, o=_O, r=_R, e=_E, linearity=0.0)
    assert deserialize(model.serialize()).pupil_type is PupilType.FISHEYE


def test_deserialize_accepts_unknown_triples():
    back = deserialize("UNK;(0,0,1);(1000,0,500);(0,1000,400)")
    assert back.model_type is ModelType.CAHV
    assert back.c == Vector.zero()


@pytest.mark.parametrize(
    "text",
    [
        "(0,0,0);(0,0,1);(1,0,0)",
        "(0,0,0);(0,0,1);(1,0,0);(0,1,0);(0,0,1)",
        "(0,0,0);(0,0,1);(1,0,0);(0,1,0);(0,0,1);(0,0,0);(0,0,0);fisheye",
        "(0,0,0);(0,0,1);(1,0,0);(0,1,0",
    ],
)
def test_deserialize_rejects_malformed_text(text):
    with pytest.raises(ValidationError):
        deserialize(text)


@pytest.mark.parametrize("model", _models())
def test_json_file_roundtrip(tmp_path, model):
    path = save_camera_model(tmp_path / "cams" / "left.json", CameraModel(model))
    assert path.exists()
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["schema_version"] == SCHEMA_VERSION
    assert data["model_type"] == model.model_type.value
    assert load_camera_model(path).model == model


def test_json_keeps_explicit_pupil_type():
    model = Cahvore(c=_C, a=_A, h=_H, v=_V, o=_O, r=_R, e=_E, linearity=1.0, pupil_type=PupilType.GENERAL)
    assert model_from_dict(model_to_dict(model)).pupil_type is PupilType.GENERAL


def test_model_from_dict_validation():
    good = model_to_dict(_models()[1])
    assert model_from_dict({**good, "model_type": "cahvor"}).model_type is ModelType.CAHVOR

    bad_inputs = [
        {**good, "schema_version": "other.v1"},
        {**good, "model_type": "PINHOLE"},
        {k: v for k, v in good.items() if k != "r"},
        {**good, "h": [1.0, 0.0, 0.0]},
        {**model_to_dict(_models()[2]), "linearity": "wide"},
        {**model_to_dict(_models()[2]), "pupil_type": "Telecentric"},
        {k: v for k, v in model_to_dict(_models()[2]).items() if k != "linearity"},
    ]
    for data in bad_inputs:
        with pytest.raises(ValidationError):
            model_from_dict(data)


def test_load_rejects_non_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_camera_model(path)
    path.write_text("[1, 2, 3]", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_camera_model(path)


def test_cahvore_build_needs_linearity():
    m = _models()[2]
    vectors = {name: getattr(m, name) for name in ("c", "a", "h", "v", "o", "r", "e")}
    with pytest.raises(ValidationError):
        _build(ModelType.CAHVORE, vectors, None, None)
    assert _build(ModelType.CAHVORE, vectors, m.linearity, None).linearity == m.linearity
