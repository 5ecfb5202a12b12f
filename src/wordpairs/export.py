from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Union

import pandas as pd

from wordpairs.extractor import Entry

LOGGER = logging.getLogger(__name__)
CSV_COLUMNS = ["English", "GermanNoun", "Article", "ExampleSentence"]
DEFAULT_CSV_NAME = "words.csv"


def to_records(entries: Iterable[Entry]) -> List[Dict[str, str]]:
    return [
        {
            "English": entry.english or "",
            "GermanNoun": entry.noun,
            "Article": entry.article or "",
            "ExampleSentence": "",
        }
        for entry in entries
    ]


def to_frame(entries: Iterable[Entry]) -> pd.DataFrame:
    return pd.DataFrame(to_records(entries), columns=CSV_COLUMNS)


def render_csv(entries: Sequence[Entry]) -> str:
    frame = to_frame(entries)
    return frame.to_csv(index=False, lineterminator="\n").rstrip("\n")


def write_csv(entries: Sequence[Entry], path: Union[str, Path]) -> Path:
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    frame = to_frame(entries)
    LOGGER.info("Writing %s entries to %s", len(frame), output_path)
    frame.to_csv(output_path, index=False, encoding="utf-8-sig", lineterminator="\n")
    return output_path


def render_tsv(entries: Sequence[Entry]) -> str:
    # Raw fields for pasting into a spreadsheet; no quoting.
    return "\n".join(
        "\t".join(record[column] for column in CSV_COLUMNS)
        for record in to_records(entries)
    )


def read_csv(source: Union[str, Path, io.TextIOBase]) -> List[Entry]:
    frame = pd.read_csv(
        source,
        dtype=str,
        keep_default_na=False,
        encoding="utf-8-sig",
    )
    missing = [column for column in CSV_COLUMNS if column not in frame.columns]
    if missing:
        raise ValueError(f"CSV is missing columns: {', '.join(missing)}")
    entries: List[Entry] = []
    for row_number, row in enumerate(frame.to_dict(orient="records"), start=1):
        noun = row["GermanNoun"].strip().lower()
        if not noun:
            raise ValueError(f"CSV row {row_number} has an empty GermanNoun")
        entries.append(
            Entry(noun=noun, article=row["Article"].strip().lower(), english=row["English"])
        )
    return entries


def render_display(entries: Iterable[Entry]) -> str:
    return ", ".join(
        f"{entry.display} — {entry.english}" if entry.english else entry.display
        for entry in entries
    )


def summarize(entries: Sequence[Entry]) -> str:
    translated = sum(1 for entry in entries if entry.english)
    plural = "" if len(entries) == 1 else "s"
    return f"{len(entries)} unique word{plural} — {translated} translated"
