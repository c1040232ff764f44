import json
from pathlib import Path

import pytest

from sora_engine.cli import load_sites, main


def _write_project(tmp_path: Path, sites: list[dict]) -> Path:
    path = tmp_path / "project.json"
    path.write_text(json.dumps({"sites": sites}))
    return path


def test_cli_prints_summary(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write_project(
        tmp_path,
        [
            {"site_id": "a", "population_category": "sparsely", "ua_characteristic": "1m_25ms", "initial_arc": "ARC-b"},
            {"site_id": "b", "population_category": "suburban", "ua_characteristic": "3m_35ms", "initial_arc": "ARC-b"},
        ],
    )
    assert main([str(path)]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["project_sail"] == "V"
    assert payload["governing_site_ids"] == ["b"]


def test_cli_exit_code_flags_out_of_scope(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write_project(
        tmp_path,
        [{"site_id": "metro", "population_category": "highdensity", "ua_characteristic": "8m_75ms", "initial_arc": "ARC-c"}],
    )
    assert main([str(path)]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["out_of_scope_site_ids"] == ["metro"]
    assert payload["sites"][0]["out_of_scope"] is True


def test_cli_single_site(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write_project(
        tmp_path,
        [{"site_id": "a", "population_category": "remote", "ua_characteristic": "1m_25ms", "initial_arc": "b"}],
    )
    assert main([str(path), "--site", "a"]) == 0
    assert json.loads(capsys.readouterr().out)["sail"] == "II"
    assert main([str(path), "--site", "zzz"]) == 2


def test_cli_rejects_unreadable_input(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    assert main([str(path)]) == 2
    assert main([str(tmp_path / "missing.json")]) == 2


def test_load_sites_accepts_bare_list(tmp_path: Path) -> None:
    path = tmp_path / "sites.json"
    path.write_text(json.dumps([{"site_id": "solo"}]))
    assert [site.site_id for site in load_sites(path)] == ["solo"]
