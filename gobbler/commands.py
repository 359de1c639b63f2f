"""The closed set of things a gobbler invocation can do."""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class AddCommand:
    name: str
    url: str
    verify: bool = True


@dataclass(frozen=True)
class RemoveCommand:
    name: str


@dataclass(frozen=True)
class ListCommand:
    pass


@dataclass(frozen=True)
class CheckCommand:
    weeks: int = 4
    hide_empty: bool = False
    run_days: Optional[int] = None
    filter_name: Optional[str] = None
    limit: Optional[int] = 10


@dataclass(frozen=True)
class ExportCommand:
    # None writes to stdout
    dest: Optional[str] = None


@dataclass(frozen=True)
class ImportCommand:
    src: str


@dataclass(frozen=True)
class LastRanCommand:
    pass


Command = Union[
    AddCommand,
    RemoveCommand,
    ListCommand,
    CheckCommand,
    ExportCommand,
    ImportCommand,
    LastRanCommand,
]
