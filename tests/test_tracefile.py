import pytest

from simulator import AccessKind, AccessRecord
from tracefile import TraceError, TraceReader, parse_line, read_trace

SAMPLE = """==12345== Lackey, an example Valgrind tool
I  0400d7d4,8
 L 10,1
 M 20,1
 L 22,1
 S 18,1
 L 110,1
 L 210,1
 M 12,1
"""


def test_parse_load_store_modify():
    assert parse_line(" L 7ff0005b8,8") == AccessRecord(AccessKind.LOAD, 0x7ff0005b8, size=8)
    assert parse_line(" S 18,1") == AccessRecord(AccessKind.STORE, 0x18, size=1)
    assert parse_line(" M 0421c7f0,4") == AccessRecord(AccessKind.MODIFY, 0x421c7f0, size=4)


def test_parse_keeps_raw_text():
    record = parse_line(" M 20,1\n")
    assert record.raw == "M 20,1"


def test_parse_without_size():
    record = parse_line("L ffff")
    assert record.address == 0xffff
    assert record.size is None


@pytest.mark.parametrize("line", ["", "   \n", "I  0400d7d4,8", "==1== banner", "# comment"])
def test_parse_ignores_non_data_lines(line):
    assert parse_line(line) is None


@pytest.mark.parametrize("line", [
    " X 10,1", " L zz,1", " L ,1", " S 10,one", " L 10000000000000000,8",
    " L 0x10,1", " L 1_0,1", " L +10,1", " S 10,", " S 10,+4", " M",
])
def test_parse_rejects_malformed(line):
    with pytest.raises(TraceError):
        parse_line(line)


def test_parse_max_address():
    assert parse_line(" L ffffffffffffffff,8").address == (1 << 64) - 1


def test_read_trace(tmp_path):
    path = tmp_path / "yi.trace"
    path.write_text(SAMPLE)
    records, skipped = read_trace(str(path))
    assert skipped == 0
    assert [r.kind for r in records] == [
        AccessKind.LOAD, AccessKind.MODIFY, AccessKind.LOAD, AccessKind.STORE,
        AccessKind.LOAD, AccessKind.LOAD, AccessKind.MODIFY,
    ]
    assert records[-1].address == 0x12


def test_reader_skips_and_counts_malformed(tmp_path):
    path = tmp_path / "bad.trace"
    path.write_text(" L 10,1\n X 10,1\n L nothex,1\n S 20,1\n")
    reader = TraceReader(str(path))
    records = list(reader)
    assert [r.address for r in records] == [0x10, 0x20]
    assert reader.skipped == 2


def test_reader_strict_rejects_trace(tmp_path):
    path = tmp_path / "bad.trace"
    path.write_text(" L 10,1\n X 10,1\n")
    with pytest.raises(TraceError, match="bad.trace:2"):
        read_trace(str(path), strict=True)


def test_missing_trace(tmp_path):
    with pytest.raises(TraceError):
        read_trace(str(tmp_path / "nope.trace"))


@pytest.mark.parametrize("line", ["L\t10,1", " L \t 10 , 1", "\tL 10,1\r\n"])
def test_parse_any_whitespace_separator(line):
    assert parse_line(line) == AccessRecord(AccessKind.LOAD, 0x10, size=1)


def test_reader_counts_tab_separated_malformed_line(tmp_path):
    path = tmp_path / "tabs.trace"
    path.write_text("L\t10,1\nX\t10,1\nS\t0x20,1\n")
    reader = TraceReader(str(path))
    assert [r.address for r in reader] == [0x10]
    assert reader.skipped == 2
