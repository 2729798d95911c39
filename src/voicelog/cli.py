import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .core.settings import get_config_dir
from .core.transcription import (
    TranscriptionError,
    TranscriptionManager,
    print_setup_instructions,
)
from .utils.logger import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="voicelog-transcribe",
        description="Manage and run optional transcription of voice memos.",
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=None,
        help="Directory holding transcription.json and logs/ (default: user config dir).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Also write log messages to stderr.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("providers", help="List providers and their availability.")

    transcribe = sub.add_parser("transcribe", help="Transcribe an audio file.")
    transcribe.add_argument("audio_path", type=Path)
    transcribe.add_argument("--provider", default="", help="Provider to use.")
    transcribe.add_argument("--memo-id", default=None, help="Memo id to attach.")

    sub.add_parser("enable", help="Enable transcription.")
    sub.add_parser("disable", help="Disable transcription.")

    set_default = sub.add_parser("set-default", help="Set the default provider.")
    set_default.add_argument("provider")

    auto = sub.add_parser("auto-transcribe", help="Toggle auto-transcription.")
    auto.add_argument("state", choices=["on", "off"])

    configure = sub.add_parser("configure", help="Set provider options.")
    configure.add_argument("provider")
    configure.add_argument(
        "options",
        nargs="+",
        metavar="KEY=VALUE",
        help="Provider option, e.g. model_path=/models/ggml-base.en.bin",
    )

    sub.add_parser("show-config", help="Print the current configuration.")
    sub.add_parser("setup", help="Print setup instructions for each engine.")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(list(argv) if argv is not None else None)


def parse_options(entries: List[str]) -> dict:
    parsed = {}
    for entry in entries:
        key, sep, value = entry.partition("=")
        if not sep or not key:
            raise ValueError(f"expected KEY=VALUE, got '{entry}'")
        parsed[key] = value
    return parsed


def run_command(args: argparse.Namespace, manager: TranscriptionManager) -> None:
    command = args.command

    if command == "providers":
        available = manager.available_providers()
        for name in sorted(manager.all_providers()):
            status = "available" if name in available else "unavailable"
            print(f"{name}\t{status}")
    elif command == "transcribe":
        result = manager.transcribe(args.audio_path, args.provider)
        result.memo_id = args.memo_id
        print(json.dumps(result.to_dict(), indent=2))
    elif command == "enable":
        manager.set_enabled(True)
    elif command == "disable":
        manager.set_enabled(False)
    elif command == "set-default":
        manager.set_default_provider(args.provider)
    elif command == "auto-transcribe":
        manager.set_auto_transcribe(args.state == "on")
    elif command == "configure":
        manager.configure_provider(args.provider, parse_options(args.options))
    elif command == "show-config":
        print(json.dumps(manager.get_config().model_dump(), indent=2))


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    if args.command == "setup":
        print_setup_instructions()
        return 0

    config_dir = args.config_dir if args.config_dir is not None else get_config_dir()
    configure_logging(config_dir, console=args.verbose or None)
    try:
        manager = TranscriptionManager(config_dir)
        run_command(args, manager)
    except (TranscriptionError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
