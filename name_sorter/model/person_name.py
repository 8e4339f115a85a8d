"""Person name ordering key.

``PersonName`` is the value the sorting strategies order by.  A name is parsed
from a single line of text into one to three given names followed by a single
last name, and compares by last name first and given names second.  Both
comparisons are case-insensitive and use ordinal code-point order after
``str.casefold`` so the result never depends on the host locale.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import total_ordering
from typing import Tuple

__all__ = [
    "InvalidNameFormatError",
    "MAX_NAME_PARTS",
    "MIN_NAME_PARTS",
    "PersonName",
]

MIN_NAME_PARTS = 2
MAX_NAME_PARTS = 4


class InvalidNameFormatError(ValueError):
    """Raised when text cannot be parsed into a given name and a last name."""


@total_ordering
@dataclass(frozen=True, slots=True, eq=False)
class PersonName:
    """A person's given names and last name."""

    given_names: Tuple[str, ...]
    last_name: str

    def __post_init__(self) -> None:
        if not isinstance(self.given_names, tuple):
            raise TypeError("PersonName.given_names must be a tuple of strings")
        parts = (*self.given_names, self.last_name)
        if not MIN_NAME_PARTS <= len(parts) <= MAX_NAME_PARTS:
            raise InvalidNameFormatError(
                "A name must contain between one and three given names and a last name"
            )
        for part in parts:
            if not isinstance(part, str):
                raise TypeError("PersonName parts must be strings")
            if not part or part != "".join(part.split()):
                raise InvalidNameFormatError(
                    f"Name parts must be single non-empty words, got {part!r}"
                )

    @classmethod
    def parse(cls, line: str) -> "PersonName":
        """Parse *line* into a ``PersonName``.

        The line is trimmed and split on runs of whitespace.  The last token is
        the last name and the preceding one to three tokens are the given names.
        ``InvalidNameFormatError`` is raised for blank input or a token count
        outside ``MIN_NAME_PARTS``..``MAX_NAME_PARTS``.
        """

        if not isinstance(line, str):
            raise TypeError("line must be a string")
        parts = line.split()
        if not parts:
            raise InvalidNameFormatError("Name cannot be empty")
        if len(parts) < MIN_NAME_PARTS:
            raise InvalidNameFormatError(
                "Full name must contain at least a given name and a last name"
            )
        if len(parts) > MAX_NAME_PARTS:
            raise InvalidNameFormatError(
                "Full name cannot contain more than three given names and a last name"
            )
        return cls(given_names=tuple(parts[:-1]), last_name=parts[-1])

    @property
    def given_name(self) -> str:
        """Given names joined by single spaces."""

        return " ".join(self.given_names)

    @property
    def sort_key(self) -> Tuple[str, str]:
        return self.last_name.casefold(), self.given_name.casefold()

    def render(self) -> str:
        """Return the display form ``"<given names> <last name>"``."""

        return f"{self.given_name} {self.last_name}"

    def compare(self, other: "PersonName") -> int:
        """Three-way comparison returning ``-1``, ``0`` or ``1``."""

        mine, theirs = self.sort_key, other.sort_key
        if mine[0] != theirs[0]:
            return -1 if mine[0] < theirs[0] else 1
        if mine[1] != theirs[1]:
            return -1 if mine[1] < theirs[1] else 1
        return 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PersonName):
            return NotImplemented
        return self.sort_key == other.sort_key

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, PersonName):
            return NotImplemented
        return self.compare(other) < 0

    def __hash__(self) -> int:
        return hash(self.sort_key)

    def __str__(self) -> str:
        return self.render()
