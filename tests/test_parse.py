import itertools

import pytest

from sweepscore.samples.parse import StreamAggregate, parse_sample


def test_parse_skips_metadata_fields():
    acc = parse_sample("a,b,c,d,e,f,10,20", [])
    assert acc == [10.0, 20.0]


def test_parse_accumulates_instead_of_overwriting():
    acc = parse_sample("a,b,c,d,e,f,10,20", [])
    acc = parse_sample("a,b,c,d,e,f,30,40", acc)
    assert acc == [40.0, 60.0]


def test_parse_trims_whitespace():
    assert parse_sample("a,b,c,d,e,f, 1.5 ,  -2 ", []) == [1.5, -2.0]


@pytest.mark.parametrize("line", ["", "a,b,c", "a,b,c,d,e,f"])
def test_parse_short_line_leaves_accumulator_untouched(line):
    acc = [1.0, 2.0]
    assert parse_sample(line, acc) == [1.0, 2.0]


def test_parse_pads_wider_lines_with_zero():
    acc = parse_sample("a,b,c,d,e,f,1", [])
    acc = parse_sample("a,b,c,d,e,f,1,2,3", acc)
    assert acc == [2.0, 2.0, 3.0]


def test_parse_narrower_line_keeps_width():
    acc = parse_sample("a,b,c,d,e,f,1,2,3", [])
    acc = parse_sample("a,b,c,d,e,f,1", acc)
    assert acc == [2.0, 2.0, 3.0]


def test_parse_malformed_field_is_skipped():
    acc = parse_sample("a,b,c,d,e,f,1,oops,3", [5.0, 5.0, 5.0])
    assert acc == [6.0, 5.0, 8.0]


def test_aggregate_counts_only_sample_lines():
    agg = StreamAggregate()
    assert agg.add_line("2024-01-01, 10:00:00, 100, 200, 1, 3, -50, -60")
    assert not agg.add_line("garbage")
    assert not agg.add_line("a,b,c,d,e,f")
    assert agg.count == 1
    assert agg.sum == [-50.0, -60.0]


def test_aggregate_malformed_field_still_counts():
    agg = StreamAggregate()
    agg.add_line("a,b,c,d,e,f,1,2")
    agg.add_line("a,b,c,d,e,f,nan?,4")
    assert agg.count == 2
    assert agg.sum == [1.0, 6.0]


def test_aggregate_all_fields_malformed_still_counts():
    agg = StreamAggregate()
    agg.add_line("a,b,c,d,e,f,x,y")
    assert agg.count == 1
    assert agg.sum == [0.0, 0.0]


def test_aggregate_width_never_shrinks():
    agg = StreamAggregate()
    widths = []
    for line in ["a,b,c,d,e,f,1,2,3", "a,b,c,d,e,f,1", "short", "a,b,c,d,e,f,1,2,3,4"]:
        agg.add_line(line)
        widths.append(agg.width)
    assert widths == sorted(widths)
    assert widths[-1] == 4


def test_aggregate_is_order_insensitive():
    lines = [
        "a,b,c,d,e,f,1,2",
        "a,b,c,d,e,f,0.5",
        "a,b,c,d,e,f,x,4,8",
        "bad line",
    ]
    results = set()
    for perm in itertools.permutations(lines):
        agg = StreamAggregate()
        for ln in perm:
            agg.add_line(ln)
        results.add((tuple(agg.sum), agg.count))
    assert results == {((1.5, 6.0, 8.0), 3)}


def test_aggregate_averages():
    agg = StreamAggregate()
    assert agg.averages() == []
    agg.add_line("a,b,c,d,e,f,10,20")
    agg.add_line("a,b,c,d,e,f,30,40")
    assert agg.averages() == [20.0, 30.0]


@pytest.mark.parametrize("field", ["1_0", "٣", "１", "²", "٣.٥"])
def test_parse_non_ascii_or_underscored_field_is_skipped(field):
    assert parse_sample(f"a,b,c,d,e,f,{field},2", [5.0, 5.0]) == [5.0, 7.0]


@pytest.mark.parametrize("field, expected", [("1e2", 100.0), ("+3", 3.0), ("-.5", -0.5), (" 4. ", 4.0)])
def test_parse_accepts_plain_decimal_spellings(field, expected):
    assert parse_sample(f"a,b,c,d,e,f,{field}", []) == [expected]
