from __future__ import annotations

from typing import Callable

InputFn = Callable[[str], str]


def ask_yes_no(question: str, *, input_fn: InputFn = input) -> bool:
    """Ask a (y/n) question; only an explicit yes counts.

    EOF on stdin (piped, closed) is a no.
    """

    try:
        reply = input_fn(f"{question} (y/n) ")
    except EOFError:
        return False
    return reply.strip().lower() in {"y", "yes"}
