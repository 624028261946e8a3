import argparse
import os
import sys
import time

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from healthlog.extraction import find_field
from healthlog.transcriber import transcribe_utterance


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("category", help="Field category, e.g. 'Blood Pressure'.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--text", help="Utterance text to extract from.")
    source.add_argument("--audio", help="Audio file to transcribe first.")
    parser.add_argument("--model", default="small", help="Whisper model name.")
    parser.add_argument("--language", help="Language code (e.g., en).")
    parser.add_argument("--device", help="Device preference (cpu/cuda).")
    parser.add_argument("--compute-type", help="Compute type (int8/float16).")
    args = parser.parse_args()

    spec = find_field(args.category)
    if spec is None:
        print(f"Unknown category: {args.category}")
        return 1

    utterance = args.text
    if args.audio:
        started = time.time()
        utterance = transcribe_utterance(
            args.audio,
            model_name=args.model,
            language=args.language,
            device=args.device,
            compute_type=args.compute_type,
        )
        print(f"Transcript: {utterance!r}")
        print(f"Elapsed: {time.time() - started:.2f}s")

    extracted = spec.extract(utterance or "")
    if extracted is None:
        print(f"No {spec.category} value found.")
        return 1
    print(f"Value: {extracted.value}")
    print(f"Unit: {extracted.unit or '-'}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
