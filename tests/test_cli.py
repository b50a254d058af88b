"""Tests for cli.py — argument parsing and output files."""

from __future__ import annotations

import json

import pytest

from planetmesh.cli import PRESETS, build_parser, main
from planetmesh.io import load_terrain_config, validate_mesh_payload
from planetmesh.terrain import ARCHIPELAGO


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_octahedron_defaults(self):
        args = build_parser().parse_args(["octahedron"])
        assert args.subdivisions == 3
        assert args.radius == 1.0
        assert args.output_path is None
        assert not args.diagnose

    def test_rounded_box_size(self):
        args = build_parser().parse_args(["rounded-box", "--size", "6", "4", "8", "--roundness", "1"])
        assert args.size == [6, 4, 8]
        assert args.roundness == 1

    def test_preset_and_config_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["planet", "--preset", "flat", "--config", "x.json"])

    def test_unknown_preset(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["planet", "--preset", "gas_giant"])

    def test_preset_names(self):
        assert set(PRESETS) == {"earthlike", "archipelago", "barren_moon", "flat"}


class TestMain:
    def test_octahedron_json(self, tmp_path, capsys):
        out = tmp_path / "octa.json"
        main(["octahedron", "--subdivisions", "1", "--radius", "2", "--out", str(out)])
        data = json.loads(out.read_text(encoding="utf-8"))
        validate_mesh_payload(data)
        assert data["metadata"]["vertex_count"] == 27
        assert "Saved" in capsys.readouterr().out

    def test_cube_sphere_diagnose(self, capsys):
        main(["cube-sphere", "--grid-size", "2", "--diagnose"])
        text = capsys.readouterr().out
        assert "closed_manifold: True" in text
        assert "vertex_count: 26" in text

    def test_rounded_box_diagnose_json(self, tmp_path):
        report_path = tmp_path / "report.json"
        main(["rounded-box", "--size", "4", "4", "4", "--roundness", "1",
              "--diagnose-json", str(report_path)])
        report = json.loads(report_path.read_text(encoding="utf-8"))
        assert report["collider_count"] == 15
        assert report["euler_characteristic"] == 2

    def test_write_config_then_planet(self, tmp_path):
        cfg_path = tmp_path / "terrain.json"
        main(["write-config", "--preset", "archipelago", "--out", str(cfg_path)])
        assert load_terrain_config(cfg_path) == ARCHIPELAGO

        out = tmp_path / "planet.json"
        main(["planet", "--subdivisions", "1", "--config", str(cfg_path), "--out", str(out)])
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["metadata"]["name"] == "Planet"

    def test_flat_planet_radius(self, tmp_path):
        report_path = tmp_path / "report.json"
        main(["planet", "--subdivisions", "2", "--radius", "2", "--preset", "flat",
              "--diagnose-json", str(report_path)])
        report = json.loads(report_path.read_text(encoding="utf-8"))
        assert report["min_radius"] == pytest.approx(3.0)
        assert report["max_radius"] == pytest.approx(3.0)

    def test_degenerate_radius_raises(self):
        with pytest.raises(ValueError):
            main(["octahedron", "--radius", "0"])
