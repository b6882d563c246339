"""Interactive yes/no prompts."""

from __future__ import annotations

import sys
from typing import TextIO


def ask_for_confirmation(
    question: str,
    reader: TextIO | None = None,
    writer: TextIO | None = None,
) -> bool:
    """Ask ``question`` until a yes or no answer is given; the default is no.

    Raises EOFError if the input ends before a full answer line is read.
    """
    reader = reader if reader is not None else sys.stdin
    writer = writer if writer is not None else sys.stdout

    while True:
        try:
            writer.write(question + "(y/N)\n")
            writer.flush()
        except OSError as exc:
            raise OSError(f"unable to ask for confirmation with error {exc}") from exc

        line = reader.readline()
        if not line.endswith("\n"):
            raise EOFError("unable to read string with error EOF")

        answer = line.strip().lower()
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no", ""):
            return False