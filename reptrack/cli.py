"""Command-line interface for replaying recorded keypoint streams.

Usage:
    reptrack replay session.jsonl --exercise knee
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import numpy as np

from reptrack.config import EXERCISES, SessionConfig
from reptrack.quality.failures import UnknownExerciseError
from reptrack.repdetect.baseline import RepetitionEvent
from reptrack.session import ExerciseSession
from reptrack.signals.kinematics import angle_series
from reptrack.vision.recording import load_keypoint_frames


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="reptrack", description=__doc__.splitlines()[0])
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    replay = subparsers.add_parser("replay", help="Count repetitions in a JSONL keypoint recording.")
    replay.add_argument("recording", type=Path, help="Path to the JSONL recording.")
    replay.add_argument(
        "--exercise",
        default="knee",
        help=f"Exercise to count ({', '.join(sorted(EXERCISES))}).",
    )
    replay.add_argument(
        "--min-confidence",
        type=float,
        default=None,
        help="Keypoint confidence threshold (defaults to REPTRACK_MIN_CONFIDENCE or 0.5).",
    )
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def replay(recording: Path, exercise: str, config: SessionConfig) -> int:
    """Replay ``recording`` through a session and print the result."""
    frames = list(load_keypoint_frames(recording))
    session = ExerciseSession(exercise, config)

    def report(event: RepetitionEvent) -> None:
        print(f"rep {event.count} at frame {event.frame_index} ({event.angle:.1f} deg)")

    session.subscribe(report)
    skipped = sum(1 for frame in frames if session.process_frame(frame).skipped is not None)

    angles = angle_series(frames, session.definition.triplet, config.min_confidence)
    usable = angles[~np.isnan(angles)]
    print(f"exercise: {session.exercise}")
    print(f"frames: {len(frames)} (skipped {skipped})")
    if usable.size:
        print(f"angle range: {usable.min():.1f} - {usable.max():.1f} deg")
    print(f"repetitions: {session.count}")
    return session.count


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = SessionConfig.from_env()
        if args.min_confidence is not None:
            config = replace(config, min_confidence=args.min_confidence)
    except ValueError as exc:
        print(f"error: invalid configuration: {exc}", file=sys.stderr)
        return 2

    try:
        replay(args.recording, args.exercise, config)
    except UnknownExerciseError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except FileNotFoundError as exc:
        print(f"error: recording not found: {exc.filename}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
