"""Command line interface for variantgen."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .api import build_pack, plan_dry_run, validate_tables
from .collector import short_name
from .config import PackConfig, load_config
from .errors import VariantGenError
from .logging import configure_logging
from .reporting import get_reporter, make_reporter, set_reporter, set_verbosity


def _build_cmd(config: PackConfig, args: argparse.Namespace) -> int:
    build_pack(config)
    return 0


def _plan_cmd(config: PackConfig, args: argparse.Namespace) -> int:
    results, plan = plan_dry_run(config)
    rep = get_reporter()
    rep.flush()
    if args.json:
        rep.document("plan", plan)
    else:
        for r in results:
            new = ",".join(
                f"{short_name(k)}={v}" for k, v in r.allocated.items()
            )
            rep.status(f"{r.group} ({r.identity}): existing={r.reused} new=[{new}]")
    return 0


def _validate_cmd(config: PackConfig, args: argparse.Namespace) -> int:
    issues = validate_tables(config)
    rep = get_reporter()
    failed = False
    for identity, problems in issues.items():
        for problem in problems:
            failed = True
            rep.error(f"{identity}: {problem}")
    return 1 if failed else 0


def _add_pack_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "-c",
        "--config",
        type=Path,
        help="YAML or JSON config file (pack_root, namespace, source_dir, ...)",
    )
    p.add_argument("--pack-root", type=Path, dest="pack_root")
    p.add_argument("--namespace")
    p.add_argument(
        "--source", type=Path, dest="source_dir", help="Folder of image groups"
    )
    p.add_argument(
        "--summary",
        type=Path,
        dest="summary_path",
        help="Where to write the key info summary JSON",
    )
    p.add_argument(
        "--force",
        action="store_true",
        default=None,
        help="Recreate item models from scratch, discarding previous slots",
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="variantgen",
        description="Assign custom model data slots to resource pack item variants",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (repeatable)",
    )
    p.add_argument(
        "-r",
        "--reporter",
        choices=["plain", "rich", "json", "silent"],
        default="plain",
        help="Select reporter backend: plain (default), rich, json (JSONL events), silent",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    b = sub.add_parser("build", help="Allocate slots and write the pack")
    _add_pack_args(b)
    b.set_defaults(func=_build_cmd)

    pl = sub.add_parser("plan", help="Show allocations without writing")
    _add_pack_args(pl)
    pl.add_argument(
        "--json",
        action="store_true",
        help="Emit the plan as JSON on stdout (a document event with -r json)",
    )
    pl.set_defaults(func=_plan_cmd)

    v = sub.add_parser("validate", help="Check persisted item model tables")
    _add_pack_args(v)
    v.set_defaults(func=_validate_cmd)

    return p


def _resolve_config(args: argparse.Namespace) -> PackConfig:
    config = load_config(args.config) if args.config else PackConfig()
    return config.with_overrides(
        pack_root=args.pack_root,
        namespace=args.namespace,
        source_dir=args.source_dir,
        summary_path=args.summary_path,
        force=args.force,
    )


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    set_reporter(
        make_reporter(args.reporter, interactive=sys.stderr.isatty())
    )
    set_verbosity(args.verbose)
    configure_logging(args.verbose)
    rep = get_reporter()
    try:
        config = _resolve_config(args)
        return args.func(config, args)
    except VariantGenError as e:
        rep.error(f"{e.code}: {e.message}", error=e.to_dict())
        return 2
    finally:
        rep.flush()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
