"""
Program text loading for the command-line tools.

The machine itself only accepts sequences of ints; this module turns the
usual comma-separated program files into one.
"""

from __future__ import annotations

from pathlib import Path

from .errors import ProgramLoadError


def parse_values(text: str, source: str | None = None) -> list[int]:
    """Parse comma-separated integers. Blank fields are skipped."""
    values = []
    for index, token in enumerate(text.split(",")):
        token = token.strip()
        if not token:
            continue
        try:
            values.append(int(token))
        except ValueError:
            raise ProgramLoadError(token=token, index=index, source=source) from None
    return values


def parse_program(text: str, source: str | None = None) -> list[int]:
    """Parse program text: comma-separated words, line breaks separate words too."""
    return parse_values(",".join(text.splitlines()), source=source)


def load_program(path: str | Path) -> list[int]:
    path = Path(path)
    return parse_program(path.read_text(), source=str(path))
