"""Tests for the bridgegen CLI."""

from pathlib import Path

from bridgegen.cli import main

COUNTER = """
object MyObject {
    property i32 count;
    signal countChanged();
    invokable void increment() mut;
}
"""


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_generates_all_three_files(tmp_path: Path, capsys) -> None:
    source = _write(tmp_path / "my_object.bridge", COUNTER)
    out = tmp_path / "out"

    exit_code = main([str(source), "--output-dir", str(out)])

    assert exit_code == 0
    assert (out / "include" / "my_object.h").read_text(encoding="utf-8").startswith(
        "// AUTO-GENERATED - DO NOT EDIT"
    )
    assert (out / "src" / "my_object.cpp").exists()
    assert "pub trait MyObjectImpl" in (out / "src" / "my_object.rs").read_text(encoding="utf-8")
    assert "Generated:" in capsys.readouterr().out


def test_failing_object_writes_nothing(tmp_path: Path, capsys) -> None:
    source = _write(
        tmp_path / "objects.bridge",
        COUNTER + "object Broken { property i32 level; }\n",
    )
    out = tmp_path / "out"

    exit_code = main([str(source), "-o", str(out)])

    assert exit_code == 1
    assert (out / "include" / "my_object.h").exists()
    assert not (out / "include" / "broken.h").exists()
    err = capsys.readouterr().err
    assert "Broken: 1 violation(s)" in err
    assert "[missing-notify-signal] property level" in err


def test_parse_failure_exits_non_zero(tmp_path: Path, capsys) -> None:
    source = _write(tmp_path / "bad.bridge", "object Bad { property; }")

    exit_code = main([str(source), "-o", str(tmp_path / "out")])

    assert exit_code == 1
    assert "cannot parse" in capsys.readouterr().err


def test_missing_input(tmp_path: Path, capsys) -> None:
    exit_code = main([str(tmp_path / "absent.bridge"), "-o", str(tmp_path / "out")])

    assert exit_code == 1
    assert "does not exist" in capsys.readouterr().err


def test_json_input_and_flags(tmp_path: Path, samples_dir: Path) -> None:
    out = tmp_path / "out"

    exit_code = main([
        str(samples_dir / "shapes.json"),
        "-o", str(out),
        "--namespace-prefix", "app",
        "--guard-initialization",
    ])

    assert exit_code == 0
    header = (out / "include" / "canvas.h").read_text(encoding="utf-8")
    source = (out / "src" / "canvas.cpp").read_text(encoding="utf-8")
    assert "namespace app::canvas {" in header
    assert "qWarning(" in source


def test_config_file_and_override(tmp_path: Path) -> None:
    source = _write(tmp_path / "my_object.bridge", COUNTER)
    config = _write(
        tmp_path / "bridgegen.toml",
        '[bridgegen]\nnamespace_prefix = "fromfile"\nbase_class = "QObject"\n',
    )
    out = tmp_path / "out"

    exit_code = main([str(source), "-o", str(out), "--config", str(config),
                      "--namespace-prefix", "flag"])

    assert exit_code == 0
    header = (out / "include" / "my_object.h").read_text(encoding="utf-8")
    assert "namespace flag::my_object {" in header
    assert "class MyObject : public QObject" in header


def test_bad_config(tmp_path: Path, capsys) -> None:
    source = _write(tmp_path / "my_object.bridge", COUNTER)
    config = _write(tmp_path / "bridgegen.toml", "[bridgegen]\ncolour = \"red\"\n")

    exit_code = main([str(source), "--config", str(config)])

    assert exit_code == 1
    assert "unknown option 'colour'" in capsys.readouterr().err


def test_diagnostics_go_through_the_logger(tmp_path: Path, capsys) -> None:
    source = _write(tmp_path / "broken.bridge", "object Broken { property i32 level; }")

    exit_code = main([str(source), "-o", str(tmp_path / "out")])

    assert exit_code == 1
    err = capsys.readouterr().err
    assert "[bridgegen] ERROR Broken: 1 violation(s)" in err
    assert "[bridgegen] ERROR   [missing-notify-signal] property level" in err


def test_json_with_wrongly_typed_fields_is_a_parse_failure(tmp_path: Path, capsys) -> None:
    source = _write(
        tmp_path / "objects.json",
        '{"objects": [{"name": "A", "invokables": [{"name": "total", "return": 5}]}]}',
    )

    exit_code = main([str(source), "-o", str(tmp_path / "out")])

    assert exit_code == 1
    err = capsys.readouterr().err
    assert "cannot parse" in err
    assert "objects[0].invokables[0].return: expected a string" in err
