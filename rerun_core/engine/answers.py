"""Answer files: ``KEY=value`` data used to fill in option values non-interactively."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Mapping, Optional

from rerun_core.core.file_io import read_text

from .errors import MetadataError, RecordMissing
from .metadata import parse_record


def answer_key(option_name: str) -> str:
    """Answer-file key for an option: its name uppercased, dashes folded to underscores."""
    return option_name.upper().replace("-", "_")


def load_answers(path: Path | str) -> Dict[str, str]:
    """Parse an answer file with the metadata record grammar; later keys win."""
    answers_path = Path(path).expanduser()
    if not answers_path.is_file():
        raise RecordMissing(answers_path)
    try:
        text = read_text(answers_path)
    except OSError as exc:
        raise MetadataError(f"cannot read {answers_path}: {exc}") from exc
    return dict(parse_record(text, answers_path))


def lookup_answer(answers: Mapping[str, str], option_name: str) -> Optional[str]:
    value = answers.get(answer_key(option_name))
    return value if value else None
