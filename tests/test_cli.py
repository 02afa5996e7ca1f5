import json

import pytest

from sciimg.api.model_io import load_camera_model, save_camera_model
from sciimg.camera.base import ModelType
from sciimg.camera.cahv import Cahv
from sciimg.camera.cahvor import Cahvor
from sciimg.cli.main import main
from sciimg.core.vector import Vector
from sciimg.exceptions import ValidationError


def _write_cahv(path):
    return save_camera_model(
        path,
        Cahv(
            c=Vector.zero(),
            a=Vector(0.0, 0.0, 1.0),
            h=Vector(1000.0, 0.0, 500.0),
            v=Vector(0.0, 1000.0, 400.0),
        ),
    )


def _write_cahvor(path):
    return save_camera_model(
        path,
        Cahvor(
            c=Vector.zero(),
            a=Vector(0.0, 0.0, 1.0),
            h=Vector(1000.0, 0.0, 500.0),
            v=Vector(0.0, 1000.0, 400.0),
            o=Vector(0.0, 0.0, 1.0),
            r=Vector(0.0, -0.05, 0.01),
        ),
    )


def test_info(tmp_path, capsys):
    path = _write_cahv(tmp_path / "cam.json")
    assert main(["info", str(path)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["model_type"] == "CAHV"
    assert out["f"] == 1000.0
    assert out["hc"] == 500.0
    assert out["vc"] == 400.0


def test_project_reports_failed_points(tmp_path, capsys):
    path = _write_cahv(tmp_path / "cam.json")
    rc = main(["project", str(path), "--xyz", "1", "0", "10", "--xyz", "1", "1", "0"])
    rows = json.loads(capsys.readouterr().out)
    assert rc == 1
    assert rows[0]["sample"] == pytest.approx(600.0)
    assert rows[0]["line"] == pytest.approx(400.0)
    assert "error" in rows[1]


def test_unproject(tmp_path, capsys):
    path = _write_cahv(tmp_path / "cam.json")
    assert main(["unproject", str(path), "--ls", "400", "500"]) == 0
    rows = json.loads(capsys.readouterr().out)
    assert rows[0]["origin"] == [0.0, 0.0, 0.0]
    assert rows[0]["direction"] == pytest.approx([0.0, 0.0, 1.0])


def test_solver_config_file_is_applied(tmp_path, capsys):
    path = _write_cahvor(tmp_path / "cam.json")
    cfg = tmp_path / "solver.json"
    cfg.write_text(json.dumps({"max_iter": 1}), encoding="utf-8")
    assert main(["--solver-config", str(cfg), "unproject", str(path), "--ls", "0", "0"]) == 1
    rows = json.loads(capsys.readouterr().out)
    assert "did not converge" in rows[0]["error"]
    assert main(["unproject", str(path), "--ls", "0", "0"]) == 0


def test_bad_solver_config(tmp_path):
    path = _write_cahv(tmp_path / "cam.json")
    cfg = tmp_path / "solver.json"
    cfg.write_text(json.dumps({"max_iterations": 3}), encoding="utf-8")
    with pytest.raises(ValidationError):
        main(["--solver-config", str(cfg), "info", str(path)])


def test_linearize_writes_cahv(tmp_path, capsys):
    path = _write_cahvor(tmp_path / "cam.json")
    out = tmp_path / "lin" / "cahv.json"
    assert main(["linearize", str(path), "--source", "1000", "800", "--target", "640", "480", "--out", str(out)]) == 0
    assert "Wrote" in capsys.readouterr().out
    model = load_camera_model(out)
    assert model.model_type is ModelType.CAHV
    assert model.model.hc() == pytest.approx(319.5)
    assert model.model.vc() == pytest.approx(239.5)
