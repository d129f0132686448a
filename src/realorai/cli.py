from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path

from .analysis.benchmark import BenchmarkConfig, run_benchmark
from .core.errors import DataUnavailable
from .core.settings import settings_from_env
from .data.catalog import AssetCatalog, CatalogConfig, default_image_root
from .ui.presenters import RichPresenter


def _load_catalog(args: argparse.Namespace) -> tuple[AssetCatalog, str]:
    if args.manifest:
        path = Path(args.manifest)
        return AssetCatalog.from_manifest(path), str(path)
    root = Path(args.root) if args.root else default_image_root()
    return AssetCatalog.from_directory(CatalogConfig(root=root)), str(root)


def _cmd_catalog(args: argparse.Namespace) -> int:
    catalog, source = _load_catalog(args)
    if args.json:
        payload = {"source": source, "available": list(catalog.available_categories()), "categories": catalog.describe()}
        json.dump(payload, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0
    RichPresenter(no_color=args.no_color).show_catalog(catalog, source)
    return 0


def _cmd_benchmark(args: argparse.Namespace) -> int:
    catalog, _source = _load_catalog(args)
    config = BenchmarkConfig(
        rounds=args.rounds,
        advances=args.advances,
        seed=args.seed,
        category=args.category,
        settings=settings_from_env(),
    )
    try:
        result = run_benchmark(catalog, config)
    except DataUnavailable as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    if args.json:
        payload = asdict(result)
        payload["coverage_ok"] = result.coverage_ok
        json.dump(payload, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0
    RichPresenter(no_color=args.no_color).show_benchmark(result)
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    if args.root:
        os.environ["REALORAI_IMAGE_ROOT"] = args.root
    uvicorn.run("realorai.web.app:app", host=args.host, port=args.port, log_level=args.log_level.lower())
    return 0


def _add_source_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--root", type=str, default=None, help="Image root (<category>/<real|ai>/<file>)")
    p.add_argument("--manifest", type=str, default=None, help="JSON manifest instead of scanning a directory")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="realorai", description="Real or AI? image guessing game backend")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("REALORAI_LOG_LEVEL", "WARNING"),
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        type=str.upper,
        help="Logging verbosity (default: WARNING)",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    sub = parser.add_subparsers(dest="command", required=True)

    p_catalog = sub.add_parser("catalog", help="Summarise the image catalog")
    _add_source_args(p_catalog)
    p_catalog.add_argument("--json", action="store_true", help="Emit JSON instead of a table")
    p_catalog.set_defaults(func=_cmd_catalog)

    p_bench = sub.add_parser("benchmark", help="Measure sampler weighting, repeats and coverage")
    _add_source_args(p_bench)
    p_bench.add_argument("--rounds", type=int, default=10_000, help="Pairs to draw")
    p_bench.add_argument("--advances", type=int, default=2_000, help="Sequence advances to walk")
    p_bench.add_argument("--seed", type=int, default=101, help="RNG seed")
    p_bench.add_argument("--category", type=str, default="all", help="Category filter (default: all)")
    p_bench.add_argument("--json", action="store_true", help="Emit JSON instead of tables")
    p_bench.set_defaults(func=_cmd_benchmark)

    p_serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    p_serve.add_argument("--host", default=os.environ.get("BIND", "127.0.0.1"))
    p_serve.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8000")))
    p_serve.add_argument("--root", type=str, default=None, help="Image root served under /images")
    p_serve.set_defaults(func=_cmd_serve)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
