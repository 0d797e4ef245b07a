"""CLI entrypoint for silencecut — subcommand dispatcher."""

import argparse
import json
import logging
import sys
from pathlib import Path

from silencecut.errors import SilenceCutError


def _add_shared_args(parser: argparse.ArgumentParser) -> None:
    """Add arguments shared by every subcommand that reads a video."""
    parser.add_argument("input_file", help="Video or audio file to process.")
    parser.add_argument("--work-dir", default=None,
                        help="Directory for extracted audio (default: system temp dir)")
    parser.add_argument("-v", "--verbose", action="store_true", default=False,
                        help="Log per-range detail (default: info only)")
    parser.add_argument("--no-cache", action="store_true", default=False,
                        help="Disable file-based caching of extracted audio")


def _add_detection_args(parser: argparse.ArgumentParser) -> None:
    """Add silence detection and softness arguments."""
    parser.add_argument("--threshold-db", type=float, default=-35.0,
                        help="Silence threshold in dBFS (default: -35)")
    parser.add_argument("--min-silence", type=float, default=0.3,
                        help="Minimum silence duration in seconds (default: 0.3)")
    parser.add_argument("--softness", type=int, default=0,
                        help="Cut softness 0-100: share of each silence kept as padding (default: 0)")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments with subcommands."""
    parser = argparse.ArgumentParser(
        prog="silencecut",
        description="Detect silence in a video and cut it out",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Detect silence and list segments",
        description="Split a video into content and silence segments",
    )
    _add_shared_args(analyze_parser)
    _add_detection_args(analyze_parser)
    analyze_parser.add_argument("--delete-silence", action="store_true", default=False,
                                help="Drop silence segments from the listed timeline")
    analyze_parser.add_argument("--json", type=Path, default=None, dest="json_path",
                                help="Write the timeline as JSON to this path")

    export_parser = subparsers.add_parser(
        "export",
        help="Render the video without its silences",
        description="Detect silence and render only the content segments",
    )
    _add_shared_args(export_parser)
    export_parser.add_argument("output_file", help="Path of the rendered video.")
    _add_detection_args(export_parser)
    export_parser.add_argument("--keep-silence", action="store_true", default=False,
                               help="Include silence segments in the export")

    waveform_parser = subparsers.add_parser(
        "waveform",
        help="Extract waveform peaks",
        description="Downsample the audio track to per-bucket peaks",
    )
    _add_shared_args(waveform_parser)
    waveform_parser.add_argument("--bucket-ms", type=int, default=10,
                                 help="Bucket width in milliseconds (default: 10)")
    waveform_parser.add_argument("--json", type=Path, default=None, dest="json_path",
                                 help="Write the peaks as JSON to this path")

    subparsers.add_parser(
        "clear-cache",
        help="Delete cached audio extractions",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if hasattr(args, "softness") and not 0 <= args.softness <= 100:
        parser.error("--softness must be between 0 and 100")

    if hasattr(args, "bucket_ms") and args.bucket_ms <= 0:
        parser.error("--bucket-ms must be positive")

    return args


def _format_clip(index: int, clip) -> str:
    kind = "silence" if clip.is_silence else "content"
    mark = "x" if clip.include else " "
    return (
        f"  [{mark}] {index:3d} {kind:<7} "
        f"source {clip.source_start:8.2f}-{clip.source_end:8.2f}  "
        f"timeline {clip.timeline_start:8.2f}-{clip.timeline_end:8.2f}"
    )


def _load_session(args: argparse.Namespace):
    from silencecut.session import EditorSession
    from silencecut.types import SilenceDetectionConfig

    input_path = Path(args.input_file)
    if not input_path.exists():
        print(f"Error: file not found: {input_path}", file=sys.stderr)
        sys.exit(1)

    session = EditorSession(
        SilenceDetectionConfig(
            threshold_db=args.threshold_db,
            min_silence_duration=args.min_silence,
        ),
        work_dir=args.work_dir,
        use_cache=not args.no_cache,
    )
    session.process_video(input_path)
    if args.softness:
        session.set_cut_softness(args.softness)
    return session


def _run_analyze(args: argparse.Namespace) -> None:
    """Run detection and print the segment list."""
    session = _load_session(args)
    if args.delete_silence:
        session.delete_silence_clips()
    timeline = session.get_timeline()

    print(f"Source: {timeline.source_path} ({timeline.total_duration:.2f}s)")
    print(f"Silence ranges: {len(timeline.raw_silence_ranges)}")
    print(f"Segments: {len(timeline.clips)}")
    for i, clip in enumerate(timeline.clips):
        print(_format_clip(i, clip))
    print(f"Included duration: {timeline.included_duration():.2f}s")

    if args.json_path is not None:
        args.json_path.parent.mkdir(parents=True, exist_ok=True)
        args.json_path.write_text(json.dumps(timeline.to_dict(), indent=2))
        print(f"Timeline written to {args.json_path}")


def _run_export(args: argparse.Namespace) -> None:
    """Run detection and render the included segments."""
    session = _load_session(args)
    if args.keep_silence:
        timeline = session.get_timeline()
        for i, clip in enumerate(timeline.clips):
            if clip.is_silence and not clip.include:
                session.toggle_segment(i)

    last_reported = -1
    for progress in session.export(args.output_file):
        percent = int(progress.percentage)
        if percent != last_reported:
            print(f"\rExporting: {percent:3d}%", end="", flush=True)
            last_reported = percent
    print()
    print(f"Output: {args.output_file}")


def _run_waveform(args: argparse.Namespace) -> None:
    """Extract and print waveform peaks."""
    from silencecut.audio import decode_audio
    from silencecut.waveform import extract_peaks

    input_path = Path(args.input_file)
    if not input_path.exists():
        print(f"Error: file not found: {input_path}", file=sys.stderr)
        sys.exit(1)

    samples, sr, channels = decode_audio(
        input_path, work_dir=args.work_dir, use_cache=not args.no_cache,
    )
    data = extract_peaks(samples, sr, channels, args.bucket_ms)

    print(f"Duration: {data.duration:.2f}s")
    print(f"Peaks: {len(data.peaks)} x {data.bucket_ms} ms")
    if args.json_path is not None:
        args.json_path.parent.mkdir(parents=True, exist_ok=True)
        args.json_path.write_text(json.dumps(data.to_dict()))
        print(f"Waveform written to {args.json_path}")


def _run_clear_cache(args: argparse.Namespace) -> None:
    from silencecut.cache import clear_cache

    removed = clear_cache()
    print(f"Removed {removed} cached file(s)")


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint."""
    args = parse_args(argv)

    level = logging.DEBUG if getattr(args, "verbose", False) else logging.INFO
    logging.basicConfig(level=level, format="%(name)s %(levelname)s: %(message)s")

    commands = {
        "analyze": _run_analyze,
        "export": _run_export,
        "waveform": _run_waveform,
        "clear-cache": _run_clear_cache,
    }
    try:
        commands[args.command](args)
    except SilenceCutError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
