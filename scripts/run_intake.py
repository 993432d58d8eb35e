from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from apps.intake.chain_trigger import DEFAULT_CHAIN_NAME, ChainTriggerClient
from apps.intake.pipeline import process_dictation
from apps.intake.resolvers import ConsolePromptResolver
from apps.intake.steps.step03_identity import extract_identity
from packages.shared.errors import ChainTriggerError, IncompleteIdentityError
from packages.shared.models import ChainName, EntryPath


def _read_transcript(args: argparse.Namespace) -> str:
    if args.file:
        return Path(args.file).read_text(encoding="utf-8")
    if args.text is not None:
        return args.text
    return sys.stdin.read()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Extract a patient source ID from a transcript.")
    src = parser.add_mutually_exclusive_group()
    src.add_argument("--text", help="Transcript text (default: read stdin)")
    src.add_argument("--file", help="Path to a transcript file")
    parser.add_argument("--prompt", action="store_true", help="Ask on the terminal for missing fields")
    parser.add_argument("--trigger", action="store_true", help="Trigger the chain after extraction")
    parser.add_argument(
        "--chain",
        default=DEFAULT_CHAIN_NAME,
        help=f"Chain to run (known: {', '.join(c.value for c in ChainName)})",
    )
    parser.add_argument(
        "--source",
        default=EntryPath.AMBIENT_DICTATION.value,
        choices=[p.value for p in EntryPath],
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    transcript = _read_transcript(args)
    if not args.prompt and not args.trigger:
        identity = extract_identity(transcript)
        print(json.dumps(identity.model_dump(mode="json"), indent=2))
        return 0 if identity.canonical_key else 2

    try:
        outcome = process_dictation(
            transcript,
            resolver=ConsolePromptResolver() if args.prompt else None,
            client=ChainTriggerClient() if args.trigger else None,
            chain_name=args.chain,
            source=EntryPath(args.source),
        )
    except IncompleteIdentityError as exc:
        print(json.dumps({"error": str(exc), "missing_fields": exc.missing_fields}, indent=2))
        return 2
    except ChainTriggerError as exc:
        print(json.dumps({"error": str(exc), "result": exc.result.model_dump()}, indent=2))
        return 1

    print(json.dumps(outcome.model_dump(mode="json"), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
