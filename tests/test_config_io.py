import json

import pytest

from pyimproc.config.io import load_config


def test_load_config_json(tmp_path):
    config_path = tmp_path / "cfg.json"
    payload = {"input": "in.pgm", "steps": [{"op": "dilate", "width": 3}], "report": None}
    config_path.write_text(json.dumps(payload), encoding="utf-8")

    assert load_config(config_path) == payload


def test_load_config_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError, match="Config file not found"):
        load_config(tmp_path / "absent.json")


def test_load_config_unknown_extension_raises(tmp_path):
    config_path = tmp_path / "cfg.txt"
    config_path.write_text("x", encoding="utf-8")

    with pytest.raises(ValueError) as exc:
        load_config(config_path)

    assert ".txt" in str(exc.value)


def test_load_config_rejects_non_mapping(tmp_path):
    config_path = tmp_path / "cfg.json"
    config_path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ValueError, match="top level"):
        load_config(config_path)


def test_load_config_yaml_optional(tmp_path):
    config_path = tmp_path / "cfg.yaml"
    config_path.write_text("input: a.pgm\nkind: int\n", encoding="utf-8")

    try:
        import yaml  # noqa: F401
    except Exception:
        with pytest.raises(ImportError) as exc:
            load_config(config_path)
        msg = str(exc.value)
        assert "pyimproc[yaml]" in msg
        assert "pip install" in msg
    else:
        assert load_config(config_path) == {"input": "a.pgm", "kind": "int"}


def test_load_config_empty_yaml_is_empty_dict(tmp_path):
    pytest.importorskip("yaml")
    config_path = tmp_path / "cfg.yml"
    config_path.write_text("", encoding="utf-8")
    assert load_config(config_path) == {}


def test_load_config_resolves_paths_next_to_config(tmp_path):
    config_dir = tmp_path / "job"
    config_dir.mkdir()
    config_path = config_dir / "pipeline.json"
    absolute_output = str(tmp_path / "out.pgm")
    config_path.write_text(
        json.dumps({"input": "scene.pgm", "output": absolute_output, "report": None, "kind": "int"}),
        encoding="utf-8",
    )

    data = load_config(config_path, relative_to_file=True)

    assert data["input"] == str(config_dir.resolve() / "scene.pgm")
    assert data["output"] == absolute_output
    assert data["report"] is None
    assert data["kind"] == "int"
    assert load_config(config_path)["input"] == "scene.pgm"
