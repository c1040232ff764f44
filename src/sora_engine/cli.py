"""Command line summary of a project's SORA classification."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys
from typing import Any, Sequence

from pydantic import ValidationError

from .api import build_engine
from .config import EngineSettings
from .models import SiteAssessment


def load_sites(path: str | Path) -> list[SiteAssessment]:
    """Read site records from ``{"sites": [...]}`` or a bare JSON list."""

    data: Any = json.loads(Path(path).read_text())
    if isinstance(data, dict):
        data = data.get("sites", [])
    if not isinstance(data, list):
        raise ValueError("Project file must hold a list of sites")
    return [SiteAssessment.model_validate(item) for item in data]


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Summarize SORA classification for a project file")
    parser.add_argument("project", help="Path to project JSON with site assessments")
    parser.add_argument("--config", help="Path to TOML configuration file")
    parser.add_argument("--site", help="Only print the result for this site_id")
    args = parser.parse_args(argv)

    settings = EngineSettings.from_toml(args.config) if args.config else EngineSettings()
    engine = build_engine(settings)
    try:
        summary = engine.summarize(load_sites(args.project))
    except (OSError, ValueError, ValidationError) as exc:
        print(f"error: cannot read {args.project}: {exc}", file=sys.stderr)
        return 2

    if args.site:
        try:
            output = summary.site(args.site).to_dict()
        except KeyError:
            print(f"error: unknown site {args.site!r}", file=sys.stderr)
            return 2
    else:
        output = summary.to_dict()
    print(json.dumps(output, indent=2))
    return 0 if summary.complete and summary.within_scope else 1


if __name__ == "__main__":
    sys.exit(main())
