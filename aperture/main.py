"""Command line entry point for aperture."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from .app import ApertureApp
from .importer import ConfigurationError
from .scoring import get_score_tier_label


def _print(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def _names(components) -> list[str]:
    return [c.name for c in components]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aperture", description="Software catalog tools")
    parser.add_argument(
        "--root", default=".", help="Project directory holding aperture.yaml"
    )
    parser.add_argument("-v", "--verbose", action="store_true")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("import", help="Import catalog files from remote providers")
    sub.add_parser("stats", help="Show catalog statistics")
    score = sub.add_parser("score", help="Score a component")
    score.add_argument("name")
    graph = sub.add_parser("graph", help="Show dependency relations of a component")
    graph.add_argument("name")
    graph.add_argument("--depth", type=int, default=1)
    hide = sub.add_parser("hide", help="Hide a component from the catalog")
    hide.add_argument("name")
    unhide = sub.add_parser("unhide", help="Show a hidden component again")
    unhide.add_argument("name")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the aperture CLI."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    app = ApertureApp(Path(args.root).resolve())

    if args.command == "import":
        try:
            run = app.importer.import_all()
        except ConfigurationError as e:
            print(f"error: {e}", file=sys.stderr)
            return 2
        _print(
            {
                "results": {k.value: r.to_dict() for k, r in run.results.items()},
                "combined": run.combined.to_dict(),
                "stats": app.stores.imported.stats(),
            }
        )
    elif args.command == "stats":
        _print(
            {
                "catalog": app.catalog.stats(),
                "recent": _names(
                    app.catalog.recent(app.config.settings.recent_limit)
                ),
                "systems": app.catalog.system_stats(),
                "imported": app.stores.imported.stats(),
                "hidden": app.stores.hidden.stats(),
            }
        )
    elif args.command == "score":
        score = app.score_component(args.name)
        if score is None:
            print(f"error: component {args.name!r} not found", file=sys.stderr)
            return 1
        _print(
            {
                **score.model_dump(mode="json"),
                "tierLabel": get_score_tier_label(score.tier),
                "suggestions": app.scoring.suggestions(score),
            }
        )
    elif args.command == "graph":
        graph = app.graph.dependency_graph(args.name, depth=args.depth)
        _print(
            {
                "dependencies": _names(graph.dependencies),
                "dependents": _names(graph.dependents),
                "indirectDependencies": _names(graph.indirect_dependencies),
                "indirectDependents": _names(graph.indirect_dependents),
            }
        )
    elif args.command == "hide":
        app.catalog.hide_component(args.name)
    elif args.command == "unhide":
        app.catalog.unhide_component(args.name)

    return 0


if __name__ == "__main__":
    sys.exit(main())
