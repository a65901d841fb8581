"""Tests for the command-line transcoder.

WHY: The CLI is the schema-less entry point: whatever document it is
given must come out equivalent in every requested format, and failures
must be reported on stderr with a non-zero exit code, without leaving
partial output behind.

HOW: Calls cli.main() with an explicit argv against files under
tmp_path, then inspects the files written and the captured streams.

RULES:
- Status messages go to stderr; --print output goes to stdout
- Errors exit with code 1
"""

import json

import cbor2
import pytest
import yaml

from serde_hub.cli import _resolve_output_path, build_parser, main

try:
    import tomllib
except ImportError:
    import tomli as tomllib

EXPECTED = {
    "mode": "Internal",
    "clients": {"alpha": {"ip": "127.0.0.1", "port": 8080}},
    "filters": ["errors"],
}


class TestParser:
    """Argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args(["doc.yaml"])
        assert args.input_file == "doc.yaml"
        assert args.from_format is None
        assert args.to is None
        assert not args.print

    def test_from_flag(self):
        args = build_parser().parse_args(["doc.txt", "--from", "json", "--to", "yaml"])
        assert args.from_format == "json"
        assert args.to == "yaml"


class TestConvert:
    """End-to-end conversions of a YAML service config."""

    def test_writes_every_other_format_by_default(self, sample_yaml):
        main([str(sample_yaml)])
        names = sorted(p.name for p in sample_yaml.parent.iterdir())
        assert names == [
            "service.cbor",
            "service.json",
            "service.msgpack",
            "service.toml",
            "service.ubj",
            "service.yaml",
        ]

    def test_outputs_are_equivalent(self, sample_yaml):
        main([str(sample_yaml), "--to", "json,toml,cbor"])
        folder = sample_yaml.parent
        assert json.loads((folder / "service.json").read_text(encoding="utf-8")) == EXPECTED
        assert tomllib.loads((folder / "service.toml").read_text(encoding="utf-8")) == EXPECTED
        assert cbor2.loads((folder / "service.cbor").read_bytes()) == EXPECTED

    def test_output_dir(self, sample_yaml, tmp_path):
        out = tmp_path / "out"
        out.mkdir()
        main([str(sample_yaml), "--to", "json", "--output-dir", str(out)])
        assert (out / "service.json").is_file()

    def test_conflicting_names_get_a_counter(self, sample_yaml):
        main([str(sample_yaml), "--to", "json"])
        main([str(sample_yaml), "--to", "json"])
        assert (sample_yaml.parent / "service-2.json").is_file()

    def test_explicit_input_format(self, tmp_path):
        path = tmp_path / "settings.txt"
        path.write_text('{"a": 1}', encoding="utf-8")
        main([str(path), "--from", "json", "--to", "yaml"])
        assert yaml.safe_load((tmp_path / "settings.yaml").read_text(encoding="utf-8")) == {"a": 1}

    def test_int_keys_survive_as_pairs(self, tmp_path):
        path = tmp_path / "ports.yaml"
        path.write_text("80: http\n443: https\n", encoding="utf-8")
        main([str(path), "--to", "json"])
        data = json.loads((tmp_path / "ports.json").read_text(encoding="utf-8"))
        assert data == [[80, "http"], [443, "https"]]

    def test_print_text(self, sample_yaml, capsys):
        main([str(sample_yaml), "--to", "json", "--print"])
        out = capsys.readouterr().out
        assert out.startswith("# json\n")
        assert json.loads(out.split("\n", 1)[1]) == EXPECTED
        assert not (sample_yaml.parent / "service.json").exists()

    def test_print_binary_as_hex(self, sample_yaml, capsys):
        main([str(sample_yaml), "--to", "cbor", "--print"])
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "# cbor"
        assert cbor2.loads(bytes.fromhex(lines[1])) == EXPECTED

    def test_status_goes_to_stderr(self, sample_yaml, capsys):
        main([str(sample_yaml), "--to", "json"])
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Saved: service.json" in captured.err


class TestErrors:
    """Failures exit with code 1 and an Error: line on stderr."""

    def _run_failing(self, argv, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(argv)
        assert excinfo.value.code == 1
        return capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        err = self._run_failing([str(tmp_path / "nope.json")], capsys)
        assert "Error: File not found" in err

    def test_unknown_suffix(self, tmp_path, capsys):
        path = tmp_path / "notes.ini"
        path.write_text("[a]\n", encoding="utf-8")
        err = self._run_failing([str(path)], capsys)
        assert "Cannot tell the format" in err

    def test_unknown_target(self, sample_yaml, capsys):
        err = self._run_failing([str(sample_yaml), "--to", "xml"], capsys)
        assert "Unknown format 'xml'" in err

    def test_unknown_input_format(self, sample_yaml, capsys):
        err = self._run_failing([str(sample_yaml), "--from", "xml"], capsys)
        assert "Unknown format 'xml'" in err

    def test_malformed_input(self, tmp_path, capsys):
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")
        err = self._run_failing([str(path)], capsys)
        assert "Error: serde: on parsing string: " in err

    def test_failed_target_writes_nothing(self, tmp_path, capsys):
        path = tmp_path / "nulls.json"
        path.write_text('{"a": null}', encoding="utf-8")
        err = self._run_failing([str(path), "--to", "yaml,toml"], capsys)
        assert "Error: toml: serde: on emitting to string: " in err
        assert sorted(p.name for p in tmp_path.iterdir()) == ["nulls.json"]

    def test_missing_output_dir(self, sample_yaml, tmp_path, capsys):
        err = self._run_failing(
            [str(sample_yaml), "--output-dir", str(tmp_path / "absent")], capsys
        )
        assert "Output directory does not exist" in err


class TestResolveOutputPath:
    """Conflict-free output naming."""

    def test_free_name(self, tmp_path):
        assert _resolve_output_path("doc", ".json", tmp_path) == tmp_path / "doc.json"

    def test_counter_increments(self, tmp_path):
        (tmp_path / "doc.json").write_text("{}")
        (tmp_path / "doc-2.json").write_text("{}")
        assert _resolve_output_path("doc", ".json", tmp_path) == tmp_path / "doc-3.json"
