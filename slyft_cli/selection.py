"""
Interactive selection of one record out of a listing.

The candidates are always shown to the user. A single candidate is picked
without asking; with several, the user types the number from the first
column of the table.
"""

from collections.abc import Callable, Sequence
from typing import TypeVar

from slyft_cli.core.client import ValidationError

T = TypeVar("T")


class NotFoundError(ValidationError):
    """There was nothing to choose from."""


class OutOfRangeError(ValidationError):
    """The user's choice is not one of the listed numbers."""


def read_user_int_input(message: str) -> int:
    """Prompt once for an integer."""
    try:
        raw = input(message)
    except EOFError:
        raise OutOfRangeError("No choice was made")
    try:
        return int(raw.strip())
    except ValueError:
        raise OutOfRangeError("Please choose a number from the first column", details={"input": raw})


def select(
    records: Sequence[T],
    prompt: bool,
    message: str,
    display: Callable[[Sequence[T]], None],
    tail: int = 0,
    read_choice: Callable[[str], int] = read_user_int_input,
    what: str = "record",
) -> T | None:
    """
    Show ``records`` and pick one.

    Args:
        records: Candidates, in server order
        prompt: Ask the user when more than one candidate remains
        message: Prompt text
        display: Renders the candidates
        tail: When > 0, only the last ``tail`` candidates are considered
        read_choice: Reads the 1-based choice from the user
        what: Noun used in the NotFound message

    Returns:
        The chosen record, or None when several remain and prompting is off

    Raises:
        NotFoundError: No candidates at all
        OutOfRangeError: Choice outside [1, len(candidates)]

    """
    if not records:
        raise NotFoundError(f"No {what}. Sorry")

    candidates = list(records)
    if tail > 0:
        candidates = candidates[-tail:]

    display(candidates)

    if len(candidates) == 1:
        return candidates[0]

    if not prompt:
        return None

    choice = read_choice(message)
    if not 1 <= choice <= len(candidates):
        raise OutOfRangeError(
            "Please choose a number from the first column",
            details={"choice": choice, "count": len(candidates)},
        )
    return candidates[choice - 1]
