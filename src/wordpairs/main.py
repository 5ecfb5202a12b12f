"""Command-line pipeline to pull German article+noun pairs out of text and export them."""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

import ftfy

from wordpairs.export import render_csv, render_display, render_tsv, summarize, write_csv
from wordpairs.extractor import DEFAULT_VARIANT, DETERMINER_VARIANTS, Entry, config_for_variant, extract
from wordpairs.translation import (
    DEFAULT_BACKOFF_SECONDS,
    DEFAULT_MAX_ATTEMPTS,
    MT_API_KEY,
    MT_DEFAULT_URL,
    MYMEMORY_URL,
    NounTranslator,
    build_client,
)

LOGGER = logging.getLogger(__name__)
OUTPUT_FORMATS = ("display", "csv", "tsv")


@dataclass
class PipelineConfig:
    inputs: List[str] = field(default_factory=list)
    output: Optional[Path] = None
    output_format: str = "display"
    variant: str = DEFAULT_VARIANT
    translate: Optional[bool] = None
    mt_url: Optional[str] = None
    mt_api_key: Optional[str] = None
    mymemory_url: Optional[str] = None
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    backoff_seconds: float = DEFAULT_BACKOFF_SECONDS
    fix_encoding: bool = False

    @property
    def should_translate(self) -> bool:
        if self.translate is None:
            return self.output_format == "csv"
        return self.translate


def read_input_text(sources: Sequence[str], *, fix_encoding: bool = False) -> str:
    chunks: List[str] = []
    for source in sources or ["-"]:
        if source == "-":
            chunks.append(sys.stdin.read())
            continue
        path = Path(source)
        if not path.is_file():
            raise SystemExit(f"Input file not found: {path}")
        LOGGER.info("Reading %s", path)
        chunks.append(path.read_text(encoding="utf-8"))
    text = "\n".join(chunks)
    if fix_encoding:
        text = ftfy.fix_text(text, normalization=None)
    return text


def _log_progress(index: int, total: int, noun: str) -> None:
    LOGGER.info("Translating %s/%s: %s", index, total, noun)


def translate_missing(
    entries: List[Entry],
    config: PipelineConfig,
    translator: Optional[NounTranslator] = None,
) -> List[Entry]:
    if not entries:
        return entries
    if translator is None:
        client = build_client(config.mt_url, config.mt_api_key, config.mymemory_url)
        translator = NounTranslator(
            client,
            max_attempts=config.max_attempts,
            backoff_seconds=config.backoff_seconds,
        )
    report = translator.translate_entries(entries, only_missing=True, progress=_log_progress)
    return report.entries


def render(entries: Sequence[Entry], output_format: str) -> str:
    if output_format == "csv":
        return render_csv(entries)
    if output_format == "tsv":
        return render_tsv(entries)
    return render_display(entries)


def run_pipeline(config: PipelineConfig, translator: Optional[NounTranslator] = None) -> List[Entry]:
    extractor_config = config_for_variant(config.variant)
    text = read_input_text(config.inputs, fix_encoding=config.fix_encoding)
    entries = extract(text, extractor_config)
    if config.should_translate:
        entries = translate_missing(entries, config, translator)
    LOGGER.info("%s", summarize(entries))
    if config.output and config.output_format == "csv":
        write_csv(entries, config.output)
    elif config.output:
        config.output.parent.mkdir(parents=True, exist_ok=True)
        config.output.write_text(render(entries, config.output_format) + "\n", encoding="utf-8")
        LOGGER.info("Wrote %s entries to %s", len(entries), config.output)
    elif entries or config.output_format == "csv":
        print(render(entries, config.output_format))
    return entries


def parse_args(argv: Optional[Sequence[str]] = None) -> PipelineConfig:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "inputs",
        nargs="*",
        help="UTF-8 text files to read ('-' or nothing reads stdin)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the result here instead of stdout",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        default="display",
        choices=OUTPUT_FORMATS,
        help="display: comma-separated list, csv: spreadsheet with header, tsv: tab-separated rows for pasting",
    )
    parser.add_argument(
        "--variant",
        default=DEFAULT_VARIANT,
        choices=sorted(DETERMINER_VARIANTS),
        help="Which determiners pair with the following word",
    )
    parser.add_argument(
        "--translate",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Fetch English translations (default: only for csv output)",
    )
    parser.add_argument(
        "--mt-url",
        type=str,
        default=MT_DEFAULT_URL,
        help="LibreTranslate endpoint; MyMemory is used when unset",
    )
    parser.add_argument(
        "--mt-api-key",
        type=str,
        default=MT_API_KEY,
        help="API key for LibreTranslate (if required)",
    )
    parser.add_argument(
        "--mymemory-url",
        type=str,
        default=MYMEMORY_URL,
        help="MyMemory lookup endpoint",
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=DEFAULT_MAX_ATTEMPTS,
        help="Requests per noun before giving up",
    )
    parser.add_argument(
        "--backoff",
        type=float,
        default=DEFAULT_BACKOFF_SECONDS,
        help="Seconds to wait after the first failed attempt; grows linearly",
    )
    parser.add_argument(
        "--fix-encoding",
        action="store_true",
        help="Repair mojibake in the input before extracting",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    args = parser.parse_args(argv)
    if args.max_attempts < 1:
        parser.error("--max-attempts must be at least 1")
    logging.basicConfig(
        level=getattr(logging, args.log_level), format="%(levelname)s %(message)s"
    )
    return PipelineConfig(
        inputs=args.inputs,
        output=args.output,
        output_format=args.output_format,
        variant=args.variant,
        translate=args.translate,
        mt_url=args.mt_url,
        mt_api_key=args.mt_api_key,
        mymemory_url=args.mymemory_url,
        max_attempts=args.max_attempts,
        backoff_seconds=args.backoff,
        fix_encoding=args.fix_encoding,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    config = parse_args(argv)
    run_pipeline(config)


if __name__ == "__main__":
    main()
