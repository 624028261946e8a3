"""CLI entry point."""

from __future__ import annotations

import argparse
import logging
import os
from datetime import datetime
from functools import partial
from typing import Callable, List, Optional, Sequence, Tuple

import yaml

from .capture import GuidedCaptureSession, SessionPhase
from .config import Config, load_config, save_config
from .extraction import find_field
from .logging_utils import setup_logging
from .models import FieldKind, PendingLogEntry, local_naive
from .renderer import render_history
from .results import ErrorKind, Result
from .session_io import load_log, save_log
from .storage import LogStore, timestamp_slug
from .transcriber import transcribe_utterance
from .validator import LogEntryValidator

logger = logging.getLogger("healthlog")

REJECTION_MESSAGES = {
    ErrorKind.DUPLICATE_ENTRY: (
        "Duplicate entry detected! You already have a similar entry around this time."
    ),
    ErrorKind.OUT_OF_RANGE: "Value is outside normal range. Please check and try again.",
}

KIND_ALIASES = {
    "v": FieldKind.VITAL,
    "vital": FieldKind.VITAL,
    "vitals": FieldKind.VITAL,
    "n": FieldKind.NON_VITAL,
    "non-vital": FieldKind.NON_VITAL,
    "non-vitals": FieldKind.NON_VITAL,
}

QUIT_WORDS = {"q", "quit", "exit"}


def parse_when(value: Optional[str], now: Optional[datetime] = None) -> datetime:
    """Parse --date. A bare date keeps the current time of day."""
    current = now or datetime.now()
    if not value:
        return current
    parsed = datetime.fromisoformat(value)
    if len(value.strip()) == 10:
        return datetime.combine(parsed.date(), current.time().replace(microsecond=0))
    return local_naive(parsed)


def _load_runtime(args: argparse.Namespace) -> Tuple[Config, LogStore]:
    cfg = Config()
    if os.path.exists(args.config):
        cfg = load_config(args.config)
    if getattr(args, "log_path", None):
        cfg.log_path = args.log_path
    store = LogStore(
        entries=load_log(cfg.log_path),
        validator=LogEntryValidator(cfg.validation),
    )
    return cfg, store


def report_results(
    entries: Sequence[PendingLogEntry],
    results: Sequence[Result],
    write: Callable[[str], None] = print,
) -> int:
    accepted = 0
    for entry, result in zip(entries, results):
        if result.ok:
            accepted += 1
            write(f"Logged {entry.category}: {result.value.value} [{result.value.entry_id}]")
        else:
            message = REJECTION_MESSAGES.get(result.kind, result.reason)
            write(f"Rejected {entry.category}: {message}")
    return accepted


def _print_review(session: GuidedCaptureSession, write: Callable[[str], None]) -> None:
    write("Review your entries:")
    for step in session.review_items():
        if step.skipped:
            write(f"  {step.field_index + 1}. {step.category}: skipped")
            continue
        mark = "x" if step.included else " "
        unit = f" {step.unit}" if step.unit else ""
        write(f"  {step.field_index + 1}. [{mark}] {step.category}: {step.value}{unit}")
    write("Type a number to toggle, 'back' to edit, 'save' to submit, 'quit' to cancel.")


def run_voice_session(
    session: GuidedCaptureSession,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
    transcribe: Optional[Callable[[str], str]] = None,
) -> Optional[Tuple[PendingLogEntry, ...]]:
    """
    Drive a capture session from line input.

    Returns the committed entries, or None when the user cancels. During
    collection a line is an utterance, 'skip', 'back', an empty line (next),
    or '@path' to transcribe an audio file.
    """
    while session.phase != SessionPhase.CLOSED:
        try:
            if session.phase == SessionPhase.CHOOSING_CATEGORY:
                answer = read_line("Log vitals or non-vitals? [v/n] ").strip().lower()
                if answer in QUIT_WORDS:
                    return None
                kind = KIND_ALIASES.get(answer)
                if kind is None:
                    write("Please answer 'v' or 'n'.")
                    continue
                session.choose_category(kind)
                continue

            if session.phase == SessionPhase.COLLECTING:
                spec = session.current_field
                step = session.current_step
                example = spec.examples[0] if spec.examples else ""
                write(
                    f"Step {session.current_step_index + 1} of {session.total_steps}: "
                    f"{spec.category} (e.g. \"{example}\")"
                )
                line = read_line("> ").strip()
                lowered = line.lower()
                if lowered in QUIT_WORDS:
                    return None
                if lowered == "skip":
                    session.skip()
                    continue
                if lowered == "back":
                    session.go_back()
                    continue
                if lowered in ("", "next"):
                    result = session.advance()
                    if not result.ok:
                        write("Say something or type 'skip' first.")
                    continue
                utterance = line
                if line.startswith("@"):
                    if transcribe is None:
                        write("Audio transcription is not available.")
                        continue
                    try:
                        utterance = transcribe(line[1:].strip())
                    except RuntimeError as exc:
                        write(str(exc))
                        continue
                    write(f"You said: \"{utterance}\"")
                result = session.submit_utterance(utterance)
                if result.ok:
                    unit = f" {step.unit}" if step.unit else ""
                    write(f"Extracted: {step.value}{unit} (Enter for next)")
                else:
                    write(f"Could not find a {spec.category.lower()} value. Try again or 'skip'.")
                continue

            _print_review(session, write)
            line = read_line("> ").strip().lower()
            if line in QUIT_WORDS:
                return None
            if line == "back":
                session.go_back()
            elif line == "save":
                result = session.commit()
                if result.ok:
                    return result.value
                write("Select at least one entry to save.")
            elif line.isdigit():
                index = int(line) - 1
                current = session.steps[index].included if 0 <= index < len(session.steps) else False
                if not session.toggle_include(index, not current).ok:
                    write("That entry has no value to include.")
            else:
                write("Unknown command.")
        except EOFError:
            return None
    return None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="healthlog")
    parser.add_argument("--config", default="healthlog_config.yml", help="Config.")
    parser.add_argument("--log-path", help="Log history JSON file.")
    parser.add_argument("--verbose", action="store_true", help="Log to the console.")
    sub = parser.add_subparsers(dest="command")

    log_cmd = sub.add_parser("log", help="Quick-log one value.")
    log_cmd.add_argument("category", help="Category, e.g. 'Glucose' or 'Diet'.")
    log_cmd.add_argument("value", help="Value to log.")
    log_cmd.add_argument("--unit", help="Override the category unit.")
    log_cmd.add_argument("--date", help="ISO date or date-time. Defaults to now.")
    log_cmd.add_argument("--notes", help="Free-text notes.")

    voice_cmd = sub.add_parser("voice", help="Guided multi-step logging.")
    voice_cmd.add_argument("--kind", choices=["vitals", "non-vitals"], help="Sequence.")
    voice_cmd.add_argument("--date", help="ISO date or date-time. Defaults to now.")
    voice_cmd.add_argument("--model", help="Whisper model for @audio input.")
    voice_cmd.add_argument("--language", help="Language code for @audio input.")

    history_cmd = sub.add_parser("history", help="Render the log history.")
    history_cmd.add_argument("--days", type=int, choices=[7, 14, 30], help="Period.")
    history_cmd.add_argument("--out", help="Write Markdown to this file.")

    delete_cmd = sub.add_parser("delete", help="Delete an entry by id.")
    delete_cmd.add_argument("entry_id", help="Entry id.")

    config_cmd = sub.add_parser("config", help="Show or create the config file.")
    config_cmd.add_argument("--init", action="store_true", help="Write defaults.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "config":
        if args.init:
            if os.path.exists(args.config):
                print(f"Config already exists: {args.config}")
                return 1
            save_config(args.config, Config())
            print(f"Wrote {args.config}")
            return 0
        if not os.path.exists(args.config):
            print(f"No config at {args.config}. Use --init to create one.")
            return 1
        with open(args.config, "r", encoding="utf-8") as handle:
            print(yaml.safe_dump(yaml.safe_load(handle), sort_keys=False).rstrip())
        return 0

    if args.command not in ("log", "voice", "history", "delete"):
        parser.print_help()
        return 0

    cfg, store = _load_runtime(args)
    setup_logging(
        cfg.log_dir,
        level=logging.DEBUG if args.verbose else logging.INFO,
        console=bool(args.verbose),
    )

    when = None
    if args.command in ("log", "voice"):
        try:
            when = parse_when(args.date)
        except ValueError:
            print(f"Invalid date: {args.date}. Use YYYY-MM-DD or YYYY-MM-DDTHH:MM.")
            return 1

    if args.command == "log":
        spec = find_field(args.category)
        if spec is None:
            print(f"Unknown category: {args.category}")
            return 1
        if not args.value.strip():
            print("Please enter a value")
            return 1
        entry = PendingLogEntry(
            type=spec.kind.value,
            category=spec.category,
            value=args.value.strip(),
            unit=args.unit or spec.unit,
            timestamp=when,
            notes=(args.notes or "").strip() or None,
        )
        result = store.add_entry(entry)
        report_results([entry], [result])
        if not result.ok:
            return 1
        save_log(cfg.log_path, store.entries)
        return 0

    if args.command == "voice":
        session = GuidedCaptureSession(when, notes=cfg.voice_notes)
        if args.kind:
            session.choose_category(KIND_ALIASES[args.kind])
        transcribe = partial(
            transcribe_utterance,
            model_name=args.model or cfg.speech.whisper_model,
            language=args.language or cfg.speech.language,
            device=cfg.speech.device,
            compute_type=cfg.speech.compute_type,
        )
        entries = run_voice_session(session, read_line=input, transcribe=transcribe)
        if not entries:
            logger.info("Voice session abandoned before commit")
            print("Nothing logged.")
            return 0
        results = store.add_many(entries)
        accepted = report_results(entries, results)
        if accepted:
            save_log(cfg.log_path, store.entries)
        print(f"Logged {accepted} of {len(entries)} entries.")
        return 0 if accepted == len(entries) else 1

    if args.command == "history":
        days = args.days or cfg.history_days
        entries = store.entries_within(days)
        note = render_history(entries, generated_on=datetime.now().date(), period_days=days)
        if args.out:
            out_path = args.out
            if os.path.isdir(out_path):
                out_path = os.path.join(out_path, f"{timestamp_slug()}--history.md")
            with open(out_path, "w", encoding="utf-8") as handle:
                handle.write(note)
            print(f"Wrote {out_path}")
        else:
            print(note)
        return 0

    try:
        removed = store.delete_entry(args.entry_id)
    except KeyError:
        print(f"No entry with id {args.entry_id}")
        return 1
    save_log(cfg.log_path, store.entries)
    print(f"Deleted {removed.category} entry {removed.entry_id}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
