"""Directory-picker collaborators used to obtain a first grant."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Protocol, TextIO

from ..paths import normalize_path

CANCEL_ANSWERS = frozenset({"q", "quit", "n", "no"})


class DirectoryPicker(Protocol):
    def pick_directory(self, seed: Path) -> Path | None:
        """Ask the user for a directory, starting at ``seed``. ``None`` = cancel."""
        ...


class PromptPicker:
    """Terminal picker: Enter accepts the seed, a path picks another, ``q`` cancels."""

    def __init__(
        self,
        read_line: Callable[[str], str] = input,
        out: TextIO | None = None,
    ) -> None:
        self._read_line = read_line
        self._out = out if out is not None else sys.stderr

    def pick_directory(self, seed: Path) -> Path | None:
        print(f"seeker needs permission to read “{seed.name or seed}”.", file=self._out)
        while True:
            try:
                answer = self._read_line(f"Grant access to [{seed}] (path, Enter to accept, q to cancel): ")
            except EOFError:
                return None
            answer = answer.strip()
            if answer.lower() in CANCEL_ANSWERS:
                return None
            candidate = normalize_path(answer) if answer else normalize_path(seed)
            if candidate.is_dir():
                return candidate
            print(f"Not a directory: {candidate}", file=self._out)


__all__ = ["DirectoryPicker", "PromptPicker"]
