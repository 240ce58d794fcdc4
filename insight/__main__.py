"""CLI entrypoint: python -m insight {run|readout|coverage|compress|assumptions|levers|frames} FILE."""

from __future__ import annotations

import argparse
import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

from insight.config import get_log_settings, load_config
from insight.dates import parse_datetime
from insight.models import to_wire


def setup_logging(config: dict) -> None:
    """Configure logging to stderr plus an optional rotating file."""
    settings = get_log_settings(config)
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings["level"], logging.INFO))

    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # stdout carries the JSON result
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(fmt)
    root.addHandler(console)

    if settings["file"]:
        log_file = Path(settings["file"])
        log_file.parent.mkdir(parents=True, exist_ok=True)
        # Rotate at 5MB, keep 3 backups
        file_handler = logging.handlers.RotatingFileHandler(
            str(log_file), maxBytes=5 * 1024 * 1024, backupCount=3,
        )
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)


logger = logging.getLogger("insight")


def cmd_run(data, now, config, args):
    """Full synthesis pass over artifact rows."""
    from insight.pipeline import run_synthesis

    return run_synthesis(data, now, project_id=args.project_id, config=config)


def cmd_readout(data, now, config, args):
    return cmd_run(data, now, config, args).readout


def cmd_coverage(data, now, config, args):
    """Coverage of any JSON document."""
    from insight.analyze.coverage import compute_coverage

    return compute_coverage(data, now, config)


def _opportunities(data):
    from insight.extract import get_list
    from insight.normalize import normalize_artifacts

    best = normalize_artifacts(data).best_opportunities
    return get_list(best.content, "opportunities") if best else []


def cmd_compress(data, now, config, args):
    from insight.process.compress import compress

    return compress(_opportunities(data), config=config)


def cmd_assumptions(data, now, config, args):
    """Assumptions derived from the compressed opportunity pool, as in a full run."""
    from insight.analyze.assumptions import derive_assumptions

    return derive_assumptions(cmd_compress(data, now, config, args).items, config)


def cmd_levers(data, now, config, args):
    from insight.analyze.levers import build_levers

    return build_levers(cmd_assumptions(data, now, config, args))


def cmd_frames(data, now, config, args):
    from insight.normalize import normalize_artifacts
    from insight.synthesize import FRAMES, select_frame

    normalized = normalize_artifacts(data, args.project_id)
    names = [args.frame] if args.frame else list(FRAMES)
    return {name: select_frame(name, normalized, config) for name in names}


COMMANDS = {
    "run": cmd_run,
    "readout": cmd_readout,
    "coverage": cmd_coverage,
    "compress": cmd_compress,
    "assumptions": cmd_assumptions,
    "levers": cmd_levers,
    "frames": cmd_frames,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m insight",
        description="Synthesize decision-support structures from stored artifacts.",
    )
    parser.add_argument("command", choices=list(COMMANDS))
    parser.add_argument("file", help="JSON file: artifact rows (or any document for 'coverage')")
    parser.add_argument("--now", help="reference time for recency (ISO8601, default: current UTC time)")
    parser.add_argument("--frame", help="single frame for the 'frames' command")
    parser.add_argument("--project-id", default="", help="project id recorded in results metadata")
    parser.add_argument("--config", default=os.environ.get("CONFIG_PATH"), help="YAML config path")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    setup_logging(config)

    try:
        with open(args.file) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        print(f"Error: cannot read {args.file}: {exc}", file=sys.stderr)
        return 1

    if args.now:
        now = parse_datetime(args.now)
        if now is None:
            print(f"Error: invalid --now value: {args.now}", file=sys.stderr)
            return 1
    else:
        now = datetime.now(timezone.utc)

    from insight.synthesize import FRAMES

    if args.frame and args.frame not in FRAMES:
        print(f"Error: unknown frame '{args.frame}' (available: {', '.join(FRAMES)})", file=sys.stderr)
        return 1

    logger.info("Running '%s' on %s", args.command, args.file)
    result = COMMANDS[args.command](data, now, config, args)
    print(json.dumps(to_wire(result), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
