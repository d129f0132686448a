from __future__ import annotations

import json
from pathlib import Path

import pytest

from realorai.cli import build_parser, main


@pytest.fixture
def manifest(tmp_path: Path) -> Path:
    path = tmp_path / "catalog.json"
    files = [f"{idx}.jpg" for idx in range(1, 6)]
    path.write_text(
        json.dumps({"people": {"real": files, "ai": files}, "nature": {"real": files, "ai": []}}),
        encoding="utf-8",
    )
    return path


def test_catalog_json_from_directory(tmp_path: Path, capsys) -> None:
    for rel in ("city/real/1.jpg", "city/ai/1.jpg", "city/ai/1.lqip.jpg"):
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"")

    assert main(["catalog", "--root", str(tmp_path), "--json"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["available"] == ["city"]
    assert payload["categories"]["city"] == {"real": 1, "ai": 1, "available": True}


def test_catalog_table_output(manifest: Path, capsys) -> None:
    assert main(["--no-color", "catalog", "--manifest", str(manifest)]) == 0
    out = capsys.readouterr().out
    assert "people" in out
    assert "Playable categories: people" in out


def test_benchmark_json(manifest: Path, capsys) -> None:
    code = main(["benchmark", "--manifest", str(manifest), "--rounds", "200", "--advances", "30", "--json"])
    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["identical_pairs"] == 0
    assert payload["coverage_ok"] is True
    assert [freq["category"] for freq in payload["frequencies"]] == ["people"]


def test_benchmark_table_output(manifest: Path, capsys) -> None:
    assert main(["--no-color", "benchmark", "--manifest", str(manifest), "--rounds", "50", "--advances", "10"]) == 0
    assert "Category weighting" in capsys.readouterr().out


def test_benchmark_unavailable_category_exit_code(manifest: Path, capsys) -> None:
    code = main(["benchmark", "--manifest", str(manifest), "--category", "nature", "--rounds", "5", "--advances", "5"])
    assert code == 2
    assert "nature" in capsys.readouterr().err


def test_parser_defaults() -> None:
    args = build_parser().parse_args(["benchmark"])
    assert args.rounds == 10_000
    assert args.seed == 101
    assert args.category == "all"
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
