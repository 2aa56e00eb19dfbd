"""
Test SWC record parsing, cleaning and formatting.

Author: Neurite Project
Date: January 2026
"""

import io
import logging

import pytest

from neurite.errors import ParseError, StructuralError
from neurite.morphology.branch_tree import BranchTree
from neurite.morphology.swc import (
    SWCParser,
    SWCRecord,
    SWCType,
    clean_records,
    loads_swc,
    parent_index,
    parse_swc_lines,
    read_swc,
    write_swc,
)

SIMPLE_SWC = """\
# a soma with two dendrites
1 1 0.0 0.0 0.0 5.0 -1
2 3 5.0 0.0 0.0 1.0 1
3 3 10.0 0.0 0.0 1.0 2

4 3 -5.0 0.0 0.0 1.0 1
5 3 -10.0 0.0 0.0 0.5 4
"""


class TestRecord:
    """Field validation at record construction."""

    def test_valid_record(self):
        record = SWCRecord(1, SWCType.DENDRITE, 1.0, 2.0, 3.0, 0.5, 0)
        assert record.type is SWCType.DENDRITE
        assert not record.is_root

    @pytest.mark.parametrize(
        "kwargs, bad_value",
        [
            (dict(id=1, type=8, parent=0, r=1.0), 8),
            (dict(id=1, type=-1, parent=0, r=1.0), -1),
            (dict(id=-1, type=1, parent=-1, r=1.0), -1),
            (dict(id=3, type=1, parent=-2, r=1.0), -2),
            (dict(id=3, type=1, parent=3, r=1.0), 3),
            (dict(id=3, type=1, parent=5, r=1.0), 5),
            (dict(id=3, type=1, parent=2, r=-0.1), -0.1),
        ],
    )
    def test_invalid_fields(self, kwargs, bad_value):
        with pytest.raises(StructuralError) as exc_info:
            SWCRecord(x=0.0, y=0.0, z=0.0, **kwargs)
        assert exc_info.value.value == bad_value

    def test_to_line_is_one_based(self):
        record = SWCRecord(4, SWCType.AXON, 1.5, -2.25, 3.0, 0.75, 2)
        assert record.to_line() == "5 2 1.5 -2.25 3 0.75 3"

    def test_root_parent_stays_minus_one(self):
        record = SWCRecord(0, SWCType.SOMA, 0.0, 0.0, 0.0, 5.0, -1)
        assert str(record).endswith(" -1")

    def test_seven_significant_digits(self):
        record = SWCRecord(0, SWCType.SOMA, 1.23456789, 0.0, 0.0, 1.0, -1)
        assert record.to_line().split()[2] == "1.234568"

    def test_round_trip(self):
        original = SWCRecord(6, SWCType.APICAL_DENDRITE, 12.5, -3.125, 0.001, 2.5, 3)
        parser = SWCParser()

        parsed = parser.parse_record(original.to_line())

        assert (parsed.type, parsed.x, parsed.y, parsed.z, parsed.r, parsed.parent) == (
            original.type, original.x, original.y, original.z, original.r, original.parent,
        )
        assert parsed.id == original.id


class TestParser:
    """Line parsing and error reporting."""

    def test_skips_comments_and_blank_lines(self):
        records = parse_swc_lines(io.StringIO(SIMPLE_SWC))

        assert [r.id for r in records] == [0, 1, 2, 3, 4]
        assert [r.parent for r in records] == [-1, 0, 1, 0, 3]

    def test_parse_error_carries_line_number(self):
        text = "1 1 0 0 0 1 -1\n# comment\n2 3 zero 0 0 1 1\n"
        with pytest.raises(ParseError) as exc_info:
            parse_swc_lines(io.StringIO(text))
        assert exc_info.value.lineno == 3
        assert "line 3" in str(exc_info.value)

    def test_missing_field(self):
        with pytest.raises(ParseError) as exc_info:
            parse_swc_lines(["1 1 0 0 0 1"])
        assert exc_info.value.lineno == 1

    def test_out_of_range_field_becomes_parse_error(self):
        with pytest.raises(ParseError) as exc_info:
            parse_swc_lines(["1 1 0 0 0 1 -1", "2 9 0 0 0 1 1"])
        assert exc_info.value.lineno == 2
        assert isinstance(exc_info.value, StructuralError)

    def test_lenient_parse_skips_bad_records(self, caplog):
        lines = ["1 1 0 0 0 1 -1", "2 3 0 0 0 -1 1", "3 3 1 0 0 1 1"]
        with caplog.at_level(logging.WARNING, logger="neurite.morphology.swc"):
            records = parse_swc_lines(lines, strict=False)

        assert [r.id for r in records] == [0, 2]
        assert "line 2" in caplog.text

    def test_indented_comment_is_skipped(self):
        records = parse_swc_lines(["1 1 0 0 0 1 -1", "   # indented note", "2 3 1 0 0 1 1"])
        assert [r.id for r in records] == [0, 1]


class TestCleaning:
    """Reduction of raw records to one dense tree."""

    def test_stops_at_second_root(self):
        records = loads_swc("1 1 0 0 0 1 -1\n2 3 0 0 0 1 1\n3 1 0 0 0 1 -1\n4 3 0 0 0 1 3\n")
        assert len(records) == 2

    def test_duplicate_ids_first_wins(self):
        records = loads_swc("1 1 0 0 0 1 -1\n2 3 1 0 0 1 1\n2 3 9 9 9 1 1\n")
        assert len(records) == 2
        assert records[1].x == 1.0

    def test_sorts_and_renumbers(self):
        raw = [
            SWCRecord(0, SWCType.SOMA, 0, 0, 0, 1, -1),
            SWCRecord(9, SWCType.DENDRITE, 0, 0, 0, 1, 4),
            SWCRecord(4, SWCType.DENDRITE, 0, 0, 0, 1, 0),
            SWCRecord(12, SWCType.DENDRITE, 0, 0, 0, 1, 9),
        ]

        records = clean_records(raw)

        assert [r.id for r in records] == [0, 1, 2, 3]
        assert [r.parent for r in records] == [-1, 0, 1, 2]

    def test_input_records_left_unchanged(self):
        raw = parse_swc_lines(["1 1 0 0 0 1 -1", "5 3 1 0 0 1 1", "7 3 2 0 0 1 5"])

        first = clean_records(raw)
        second = clean_records(raw)

        assert [(r.id, r.parent) for r in raw] == [(0, -1), (4, 0), (6, 4)]
        assert [(r.id, r.parent) for r in first] == [(0, -1), (1, 0), (2, 1)]
        assert [(r.id, r.parent) for r in second] == [(0, -1), (1, 0), (2, 1)]

    def test_parent_index_feeds_branch_tree(self):
        records = loads_swc(SIMPLE_SWC)

        index = parent_index(records)
        tree = BranchTree.from_parent_index(index)

        assert index == [0, 0, 1, 0, 3]
        assert tree.num_branches() == 3
        assert tree.num_children(0) == 2

    def test_parent_index_of_nothing(self):
        assert parent_index([]) == []

    def test_parent_index_requires_root_first(self):
        records = [SWCRecord(1, SWCType.DENDRITE, 0, 0, 0, 1, 0)]
        with pytest.raises(StructuralError):
            parent_index(records)


def test_write_then_read(tmp_path):
    path = tmp_path / "cell.swc"
    records = loads_swc(SIMPLE_SWC)

    write_swc(records, path)
    reread = read_swc(path)

    assert [(r.id, r.type, r.x, r.y, r.z, r.r, r.parent) for r in reread] == [
        (r.id, r.type, r.x, r.y, r.z, r.r, r.parent) for r in records
    ]
