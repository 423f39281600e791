"""CLI for mdassets - collect Markdown images into one assets directory."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .adapters.fs_documents import FsDocuments
from .core.errors import RunAlreadyInProgress, RunFailed
from .core.model import RunReport
from .rewrite.scanner import classify, scan_image_refs
from .runtime import build_runtime


def _print_report(report: RunReport, args: argparse.Namespace) -> None:
    if args.json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
        return
    if args.quiet:
        return
    print(f"Documents: {report.documents}")
    print(f"References updated: {report.references}")
    if report.backup_name:
        print(f"Backup: {report.backup_name}")
    if report.errors:
        print(f"Errors: {len(report.errors)}")
        for message in report.errors:
            print(f"  {message}")


def cmd_run(args: argparse.Namespace, rt: Any) -> int:
    """Run the asset pipeline over a directory."""
    try:
        report = rt.pipeline.run(args.dir)
    except RunFailed as e:
        _print_report(e.report, args)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except RunAlreadyInProgress as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        rt.client.close()
    
    _print_report(report, args)
    return 0


def cmd_scan(args: argparse.Namespace, rt: Any) -> int:
    """List image references and how they would be treated, without changes."""
    assets = rt.config.assets
    documents = FsDocuments(args.dir, assets.pattern)
    rt.client.close()

    rows = []
    for doc in documents.list_documents():
        for ref in scan_image_refs(documents.read(doc)):
            rows.append({
                "document": doc.name,
                "target": ref.target,
                "kind": classify(ref.target, assets.dir).value,
            })
    
    if args.json:
        print(json.dumps(rows, indent=2, ensure_ascii=False))
    else:
        for row in rows:
            print(f"{row['document']}\t{row['kind']}\t{row['target']}")
    return 0


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="mdassets", description="Collect Markdown images into one assets directory"
    )
    parser.add_argument(
        "--version", action="version", version=f"mdassets {__version__}"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/mdassets.toml, DIR/mdassets.toml)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )
    
    subparsers = parser.add_subparsers(dest="cmd", required=True)
    
    parser_run = subparsers.add_parser("run", help="Resolve and rewrite every image reference")
    parser_run.add_argument("dir", type=Path, help="Directory containing the Markdown documents")
    
    parser_scan = subparsers.add_parser("scan", help="List image references without changing anything")
    parser_scan.add_argument("dir", type=Path, help="Directory containing the Markdown documents")
    
    args = parser.parse_args(argv)
    
    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet or args.json:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    
    if not args.dir.is_dir():
        print(f"Error: directory not found: {args.dir}", file=sys.stderr)
        sys.exit(1)
    args.dir = args.dir.resolve()
    
    handlers = {
        "run": cmd_run,
        "scan": cmd_scan,
    }
    handler = handlers.get(args.cmd)
    
    if handler:
        try:
            rt = build_runtime(target_path=args.dir, config_path=args.config)
            exit_code = handler(args, rt)
            sys.exit(exit_code)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
