"""CLI entry point for skillhub."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import cast

from skillhub import __version__
from skillhub.config import load_config
from skillhub.hub import Hub
from skillhub.quality.engine import evaluate_quality
from skillhub.quality.fingerprint import to_structural_fingerprint
from skillhub.quality.models import TrustTier
from skillhub.quality.signals import compute_quality_signals
from skillhub.registry.publish import parse_frontmatter
from skillhub.server.runner import run_server


def _read_file(path: Path) -> str:
    if not path.exists():
        print(f"Error: file not found: {path}", file=sys.stderr)
        sys.exit(1)
    return path.read_text(encoding="utf-8")


def _open_hub() -> Hub:
    config = load_config()
    return Hub.open(config.db_path, config.documents_dir, config)


def _cmd_serve(_args: argparse.Namespace) -> None:
    run_server()


def _cmd_check(args: argparse.Namespace) -> None:
    text = _read_file(cast(Path, args.file))
    summary = parse_frontmatter(text).get("description") or None
    signals = compute_quality_signals(text, summary)
    assessment = evaluate_quality(signals, TrustTier(args.tier), cast(int, args.similar))

    if args.json:
        print(json.dumps(assessment.model_dump(mode="json"), indent=2))
        return

    s = assessment.signals
    print(f"Decision:   {assessment.decision}")
    print(f"Score:      {assessment.score}")
    print(f"Trust tier: {assessment.trust_tier}")
    print(f"Reason:     {assessment.reason}")
    print(f"Words: {s.body_words}  Chars: {s.body_chars}  Unique: {s.unique_word_ratio:.2f}")
    print(f"Headings: {s.heading_count}  Bullets: {s.bullet_count}")
    print(f"Template markers: {s.template_marker_hits}  Generic summary: {s.generic_summary}")


def _cmd_fingerprint(args: argparse.Namespace) -> None:
    print(to_structural_fingerprint(_read_file(cast(Path, args.file))))


def _cmd_drain(args: argparse.Namespace) -> None:
    hub = _open_hub()
    try:
        report = hub.dispatcher.drain(cast(int, args.limit))
    finally:
        hub.close()
    print(f"Delivered: {report.delivered}  Retried: {report.retried}  Failed: {report.failed}")


def _cmd_audit(args: argparse.Namespace) -> None:
    hub = _open_hub()
    try:
        entries = hub.comments.list_audit(target_id=args.target_id, limit=cast(int, args.limit))
    finally:
        hub.close()
    if not entries:
        print(f"No audit entries for {args.target_id}.")
        return
    for entry in entries:
        print(f"{entry.id}\t{entry.created_at}\t{entry.action}\t{entry.actor_id}\t"
              f"{json.dumps(entry.metadata, sort_keys=True)}")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="skillhub",
        description="Skill registry with publish quality gate and comment moderation",
    )
    _ = parser.add_argument(
        "-V", "--version", action="version", version=f"skillhub {__version__}"
    )
    _ = parser.add_argument(
        "--log-level",
        default=os.environ.get("SKILLHUB_LOG_LEVEL", "WARNING"),
        dest="log_level",
        help="Logging level (default: $SKILLHUB_LOG_LEVEL or WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command")

    # serve subcommand
    _ = subparsers.add_parser("serve", help="Start the HTTP API server")

    # check subcommand
    check_p = subparsers.add_parser("check", help="Run the quality gate on a SKILL.md file")
    _ = check_p.add_argument("file", type=Path, help="Path to the markdown file")
    _ = check_p.add_argument(
        "--tier",
        choices=[t.value for t in TrustTier],
        default=TrustTier.LOW.value,
        help="Trust tier of the publisher (default: low)",
    )
    _ = check_p.add_argument(
        "--similar",
        type=int,
        default=0,
        help="Number of structurally identical recent submissions (default: 0)",
    )
    _ = check_p.add_argument("--json", action="store_true", help="Print the assessment as JSON")

    # fingerprint subcommand
    fp_p = subparsers.add_parser("fingerprint", help="Print the structural fingerprint of a file")
    _ = fp_p.add_argument("file", type=Path, help="Path to the markdown file")

    # drain subcommand
    drain_p = subparsers.add_parser("drain", help="Deliver pending outbound tasks")
    _ = drain_p.add_argument("--limit", type=int, default=100)

    # audit subcommand
    audit_p = subparsers.add_parser("audit", help="Show the audit trail for a target")
    _ = audit_p.add_argument("target_id", help="Comment id")
    _ = audit_p.add_argument("--limit", type=int, default=100)

    args = parser.parse_args(sys.argv[1:])
    logging.basicConfig(
        level=str(args.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    dispatch = {
        "serve": _cmd_serve,
        "check": _cmd_check,
        "fingerprint": _cmd_fingerprint,
        "drain": _cmd_drain,
        "audit": _cmd_audit,
    }
    command = cast(str | None, args.command)
    handler = dispatch.get(command) if command is not None else None
    if handler:
        handler(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
