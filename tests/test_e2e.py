"""
End-to-End Tests - Full workflows through files and the CLI.
"""

import json
import subprocess
import sys
from pathlib import Path

import pytest

from scene2 import converters
from scene2.edit import update_standard_props
from scene2.reader import Scene2Reader

from scene_fixtures import full_scene, object_chunk, objects_section, build_scene


PROJECT_ROOT = str(Path(__file__).parent.parent)


def run_cli(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "-m", "scene2.cli", *args],
        capture_output=True,
        text=True,
        cwd=PROJECT_ROOT,
    )


@pytest.fixture
def scene_file(tmp_path):
    path = tmp_path / "scene2.bin"
    path.write_bytes(full_scene())
    return path


class TestFullWorkflow:

    def test_read_edit_write_read(self, scene_file, tmp_path):
        doc = Scene2Reader.read(scene_file)
        update_standard_props(doc.find_chunk("Radio"), position_x=0.5, position_y=1.0)
        out = tmp_path / "edited.bin"
        doc.write(str(out))

        again = Scene2Reader.read(out)
        radio = again.find_chunk("Radio")
        assert radio.props.standard.position_x == 0.5
        assert radio.props.standard.position_y == 1.0
        assert radio.props.sound_type == "Point"
        assert out.stat().st_size == scene_file.stat().st_size

    def test_json_file_round_trip(self, scene_file, tmp_path):
        doc = Scene2Reader.read(scene_file)
        json_path = tmp_path / "scene.json"
        json_path.write_text(converters.to_json(doc), encoding="utf-8")

        rebuilt = converters.from_json(json_path.read_text(encoding="utf-8"))
        out = tmp_path / "rebuilt.bin"
        rebuilt.write(str(out))
        assert out.read_bytes() == scene_file.read_bytes()

    def test_overwrite_in_place(self, scene_file):
        doc = Scene2Reader.read(scene_file)
        update_standard_props(doc.find_chunk("Box01"), scaling_x=0.5)
        doc.write(str(scene_file))
        assert Scene2Reader.read(scene_file).find_chunk("Box01").props.scaling_x == 0.5


class TestCLI:
    """Test the CLI commands via subprocess."""

    def test_cli_help(self):
        result = run_cli("--help")
        assert result.returncode == 0
        assert "scene2.bin" in result.stdout

    def test_cli_no_command(self):
        result = run_cli()
        assert result.returncode == 0
        assert "Usage:" in result.stdout

    def test_cli_version(self):
        from scene2 import __version__
        result = run_cli("--version")
        assert result.returncode == 0
        assert __version__ in result.stdout

    def test_inspect(self, scene_file):
        result = run_cli("inspect", str(scene_file))
        assert result.returncode == 0
        assert "Mission" in result.stdout
        assert "Objects" in result.stdout
        assert "Init scripts" in result.stdout

    def test_list(self, scene_file):
        result = run_cli("list", str(scene_file))
        assert result.returncode == 0
        assert "Box01" in result.stdout
        assert "Gangster" in result.stdout
        assert len(result.stdout.strip().splitlines()) == 9

    def test_list_filtered(self, scene_file):
        result = run_cli("list", str(scene_file), "-s", "Objects", "-t", "Light")
        assert result.returncode == 0
        lines = result.stdout.strip().splitlines()
        assert len(lines) == 1
        assert "Lamp" in lines[0]

    def test_list_missing_section(self, scene_file):
        result = run_cli("list", str(scene_file), "-s", "Nope")
        assert result.returncode == 1
        assert "not found" in result.stderr

    def test_show(self, scene_file):
        result = run_cli("show", str(scene_file), "Lamp")
        assert result.returncode == 0
        assert "Light: Lamp" in result.stdout
        props = json.loads(result.stdout.split("\n", 1)[1])
        assert props["flags"] == "0xFF"

    def test_show_header(self, scene_file):
        result = run_cli("show", str(scene_file), "Header")
        assert result.returncode == 0
        assert '"text": "Mission"' in result.stdout

    def test_show_raw(self, scene_file):
        result = run_cli("show", str(scene_file), "Box01", "--raw")
        assert result.returncode == 0
        assert result.stdout.startswith("5")

    def test_show_missing(self, scene_file):
        result = run_cli("show", str(scene_file), "Nobody")
        assert result.returncode == 1

    def test_convert_to_and_from_json(self, scene_file, tmp_path):
        json_path = tmp_path / "scene.json"
        result = run_cli("convert", "to", "json", str(scene_file), "-o", str(json_path))
        assert result.returncode == 0
        assert json.loads(json_path.read_text())["format"] == "scene2"

        bin_path = tmp_path / "rebuilt.bin"
        result = run_cli("convert", "from", "json", str(json_path), "-o", str(bin_path))
        assert result.returncode == 0
        assert bin_path.read_bytes() == scene_file.read_bytes()

    def test_convert_to_csv_stdout(self, scene_file):
        result = run_cli("convert", "to", "csv", str(scene_file))
        assert result.returncode == 0
        assert result.stdout.startswith("section,kind,id,type,name,size")

    def test_convert_inferred_from_output(self, scene_file, tmp_path):
        txt_path = tmp_path / "scene.txt"
        result = run_cli("convert", "to", str(scene_file), "-o", str(txt_path))
        assert result.returncode == 0
        assert "=== HEADER ===" in txt_path.read_text()

    def test_convert_cannot_infer(self, scene_file):
        result = run_cli("convert", "to", str(scene_file))
        assert result.returncode == 1
        assert "Cannot infer format" in result.stderr

    def test_roundtrip_ok(self, scene_file):
        result = run_cli("roundtrip", str(scene_file))
        assert result.returncode == 0
        assert result.stdout.startswith("OK:")

    def test_roundtrip_fail(self, tmp_path):
        path = tmp_path / "bad.bin"
        path.write_bytes(build_scene(objects_section(object_chunk(b"Box01"), extra_length=10)))
        result = run_cli("roundtrip", str(path))
        assert result.returncode == 1
        assert result.stdout.startswith("FAIL:")

    def test_set(self, scene_file, tmp_path):
        out = tmp_path / "edited.bin"
        result = run_cli("set", str(scene_file), "Box01", "position_x=0.5", "rotation_z=1.0", "-o", str(out))
        assert result.returncode == 0
        box = Scene2Reader.read(out).find_chunk("Box01")
        assert box.props.position_x == 0.5
        assert box.props.rotation_z == 1.0

    def test_set_enemy(self, scene_file):
        result = run_cli("set", str(scene_file), "Gangster", "voice=5", "speed=0.5")
        assert result.returncode == 0
        enemy = Scene2Reader.read(scene_file).find_chunk("Gangster")
        assert enemy.props.voice == 5
        assert enemy.props.speed == 0.5

    def test_set_enemy_fractional_byte(self, scene_file):
        before = scene_file.read_bytes()
        result = run_cli("set", str(scene_file), "Gangster", "speed=0.5", "voice=3.7")
        assert result.returncode == 1
        assert "whole number" in result.stderr
        assert scene_file.read_bytes() == before

    def test_set_header(self, scene_file):
        result = run_cli("set", str(scene_file), "Header", "view_distance=1.0")
        assert result.returncode == 0
        assert Scene2Reader.read(scene_file).header.content.props.view_distance == 1.0

    def test_set_unknown_field(self, scene_file):
        result = run_cli("set", str(scene_file), "Box01", "colour=1")
        assert result.returncode == 1
        assert "Unknown field" in result.stderr

    def test_set_bad_assignment(self, scene_file):
        result = run_cli("set", str(scene_file), "Box01", "position_x")
        assert result.returncode == 1
        assert "field=value" in result.stderr

    def test_corrupted_file(self, tmp_path):
        path = tmp_path / "corrupt.bin"
        path.write_bytes(build_scene(objects_section(object_chunk(b"Box01")))[:-5])
        result = run_cli("list", str(path))
        assert result.returncode == 1
        assert "File corrupted near 0x" in result.stderr

    def test_missing_file(self, tmp_path):
        result = run_cli("inspect", str(tmp_path / "nope.bin"))
        assert result.returncode == 1
        assert "File not found" in result.stderr

    def test_verbose_logs_to_stderr(self, scene_file):
        result = run_cli("-v", "list", str(scene_file))
        assert result.returncode == 0
        assert "Loading object definitions..." in result.stderr
