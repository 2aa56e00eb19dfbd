"""
SWC morphology records.

An SWC file describes a morphology as one sample point per line:

    # id type x y z radius parent
    1 1 0.0 0.0 0.0 5.0 -1
    2 3 5.0 0.0 0.0 1.0 1

Ids are 1-based on disk and 0-based in memory; a parent of -1 marks the
root. Comment lines start with ``#`` and blank lines are ignored.

Reading a file yields cleaned records ready to become a single tree:
- ingestion stops at a second root record
- duplicate ids are dropped (first occurrence wins)
- records are sorted by id if needed
- ids are renumbered densely from 0, with parent ids remapped on the way

``parent_index`` turns cleaned records into the compartment parent-index
array consumed by ``BranchTree``.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, replace
from enum import IntEnum
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, TextIO, Union

from neurite.errors import ParseError, StructuralError

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "#"
PRECISION = 7


class SWCType(IntEnum):
    """Structure identifier of an SWC sample point."""

    UNDEFINED = 0
    SOMA = 1
    AXON = 2
    DENDRITE = 3
    APICAL_DENDRITE = 4
    FORK_POINT = 5
    END_POINT = 6
    CUSTOM = 7


@dataclass
class SWCRecord:
    """One SWC sample point with 0-based ``id`` and ``parent`` (-1 for the root).

    Raises:
        StructuralError: If a field is outside its allowed range
    """

    id: int
    type: SWCType
    x: float
    y: float
    z: float
    r: float
    parent: int

    def __post_init__(self) -> None:
        self.check_consistency()
        self.type = SWCType(self.type)

    def check_consistency(self) -> None:
        if not SWCType.UNDEFINED <= self.type <= SWCType.CUSTOM:
            raise StructuralError("unknown record type", value=int(self.type), index=self.id)
        if self.id < 0:
            raise StructuralError("negative ids not allowed", value=self.id)
        if self.parent < -1:
            raise StructuralError("parent id < -1 not allowed", value=self.parent, index=self.id)
        if self.parent >= self.id:
            raise StructuralError("parent id >= id is not allowed", value=self.parent, index=self.id)
        if self.r < 0:
            raise StructuralError("negative radii are not allowed", value=self.r, index=self.id)

    @property
    def is_root(self) -> bool:
        return self.parent == -1

    def renumber(self, new_id: int, id_map: Dict[int, int]) -> None:
        """Give this record ``new_id``, remapping its parent through ``id_map``.

        The old id is added to ``id_map`` so records further down can follow.
        """
        old_id = self.id
        self.id = new_id
        self.parent = id_map.get(self.parent, self.parent)
        self.check_consistency()
        id_map[old_id] = new_id

    def to_line(self) -> str:
        """Format as an SWC line with 1-based ids."""
        parent = self.parent if self.parent == -1 else self.parent + 1
        coords = " ".join(f"{v:.{PRECISION}g}" for v in (self.x, self.y, self.z, self.r))
        return f"{self.id + 1} {int(self.type)} {coords} {parent}"

    def __str__(self) -> str:
        return self.to_line()


class SWCParser:
    """Line-oriented SWC parser that tracks the current line number."""

    def __init__(self, comment_prefix: str = COMMENT_PREFIX):
        self.comment_prefix = comment_prefix
        self.lineno = 0

    def is_skipped(self, line: str) -> bool:
        stripped = line.strip()
        return not stripped or stripped.startswith(self.comment_prefix)

    def parse_record(self, line: str) -> SWCRecord:
        """Parse one non-comment line into a record.

        Raises:
            ParseError: If the line is malformed or a field is out of range
        """
        fields = line.split()
        if len(fields) != 7:
            raise ParseError(f"expected 7 fields, got {len(fields)}", self.lineno, value=line.strip())

        try:
            record_id = int(fields[0])
            kind = int(fields[1])
            x, y, z, r = (float(v) for v in fields[2:6])
            parent = int(fields[6])
        except ValueError as e:
            raise ParseError("could not parse value", self.lineno, value=str(e)) from e

        # Convert to zero-based, leaving the root marker as-is
        if parent != -1:
            parent -= 1

        try:
            return SWCRecord(record_id - 1, kind, x, y, z, r, parent)
        except StructuralError as e:
            raise ParseError(str(e), self.lineno, value=e.value) from e

    def records(self, lines: Iterable[str], strict: bool = True) -> Iterator[SWCRecord]:
        """Yield raw records from ``lines``.

        With ``strict=False`` malformed records are logged and skipped
        instead of aborting the parse.
        """
        for line in lines:
            self.lineno += 1
            if self.is_skipped(line):
                continue
            try:
                yield self.parse_record(line)
            except ParseError as e:
                if strict:
                    raise
                logger.warning("Skipping SWC record: %s", e)


def parse_swc_lines(lines: Iterable[str], strict: bool = True) -> List[SWCRecord]:
    """Parse SWC text lines into raw (uncleaned) records."""
    return list(SWCParser().records(lines, strict=strict))


def clean_records(records: Iterable[SWCRecord]) -> List[SWCRecord]:
    """Reduce raw records to one densely numbered tree.

    Stops at the second root, drops duplicate ids, sorts by id when the
    input is out of order and renumbers ids to ``0..N-1``. The input
    records are left unchanged; the result holds copies.
    """
    cleaned: List[SWCRecord] = []
    seen = set()
    num_trees = 0
    last_id = -1
    needs_sort = False

    for record in records:
        if record.is_root:
            num_trees += 1
            if num_trees > 1:
                # only a single tree is allowed
                break
        if record.id in seen:
            continue
        seen.add(record.id)
        # renumbering below must not touch the caller's records
        cleaned.append(replace(record))
        if record.id < last_id:
            needs_sort = True
        last_id = record.id

    if needs_sort:
        cleaned.sort(key=lambda rec: rec.id)

    id_map: Dict[int, int] = {}
    for next_id, record in enumerate(cleaned):
        if record.id != next_id:
            record.renumber(next_id, id_map)

    return cleaned


def read_swc(source: Union[str, Path, TextIO], strict: bool = True) -> List[SWCRecord]:
    """Read and clean the records of an SWC file or text stream."""
    if isinstance(source, (str, Path)):
        with open(source, "r", encoding="utf-8") as f:
            return clean_records(parse_swc_lines(f, strict=strict))
    return clean_records(parse_swc_lines(source, strict=strict))


def loads_swc(text: str, strict: bool = True) -> List[SWCRecord]:
    """Read and clean the records of SWC text held in a string."""
    return read_swc(io.StringIO(text), strict=strict)


def write_swc(records: Iterable[SWCRecord], sink: Union[str, Path, TextIO, None] = None) -> str:
    """Format records as SWC text, optionally writing them to ``sink``."""
    text = "".join(f"{record.to_line()}\n" for record in records)
    if isinstance(sink, (str, Path)):
        Path(sink).write_text(text, encoding="utf-8")
    elif sink is not None:
        sink.write(text)
    return text


def parent_index(records: List[SWCRecord]) -> List[int]:
    """Compartment parent-index array of cleaned records (root maps to 0).

    Raises:
        StructuralError: If the first record is not the only root
    """
    if not records:
        return []
    if not records[0].is_root:
        raise StructuralError("first record must be the root", value=records[0].parent, index=0)

    index = [0]
    for position, record in enumerate(records[1:], start=1):
        if record.is_root:
            raise StructuralError("more than one root record", value=record.parent, index=position)
        index.append(record.parent)
    return index


def morphology_from_swc(source: Union[str, Path, TextIO], strict: bool = True) -> List[int]:
    """Shortcut: read an SWC source straight to its parent-index array."""
    return parent_index(read_swc(source, strict=strict))
