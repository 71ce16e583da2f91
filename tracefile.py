# tracefile.py
"""
Reader for Valgrind lackey style memory traces:

    I 0400d7d4,8
     L 7ff0005b8,8
     S 7ff0005b0,8
     M 0421c7f0,4

Instruction fetches (I) are dropped. Lines that are not operations at
all (blank lines, ``==pid==`` banners) are ignored.
"""
import re

from simulator import AccessKind, AccessRecord

MAX_ADDRESS = (1 << 64) - 1
HEX_ADDRESS = re.compile(r"[0-9a-fA-F]+\Z")
DECIMAL_SIZE = re.compile(r"[0-9]+\Z")
MARKERS = {"L": AccessKind.LOAD, "S": AccessKind.STORE, "M": AccessKind.MODIFY}
IGNORED_MARKERS = {"I"}


class TraceError(Exception):
    """Trace source unreadable, or a malformed line in strict mode."""


def parse_line(line):
    """
    Parse one trace line. Returns an AccessRecord, or None for lines
    that carry no data access. Raises TraceError for a malformed
    operation line.
    """
    text = line.strip()
    if not text:
        return None
    parts = text.split(None, 1)
    marker = parts[0]
    if len(marker) != 1 or not marker.isalpha():
        return None
    if marker in IGNORED_MARKERS:
        return None
    kind = MARKERS.get(marker)
    if kind is None:
        raise TraceError(f"unknown operation {marker!r}")

    operand = parts[1] if len(parts) > 1 else ""
    addr_text, comma, size_text = operand.partition(",")
    addr_text = addr_text.strip()
    if not HEX_ADDRESS.match(addr_text):
        raise TraceError(f"bad address {addr_text!r}")
    address = int(addr_text, 16)
    if address > MAX_ADDRESS:
        raise TraceError(f"address {addr_text!r} does not fit in 64 bits")

    size = None
    if comma:
        size_text = size_text.strip()
        if not DECIMAL_SIZE.match(size_text):
            raise TraceError(f"bad access size {size_text!r}")
        size = int(size_text, 10)
    return AccessRecord(kind, address, size=size, raw=text)


class TraceReader:
    """
    Iterates the data accesses of a trace file in order.
    Malformed lines are skipped and counted unless `strict` is set.
    """

    def __init__(self, path, strict=False):
        self.path = path
        self.strict = strict
        self.skipped = 0

    def __iter__(self):
        try:
            with open(self.path, "r") as f:
                for lineno, line in enumerate(f, 1):
                    try:
                        record = parse_line(line)
                    except TraceError as e:
                        if self.strict:
                            raise TraceError(f"{self.path}:{lineno}: {e}") from None
                        self.skipped += 1
                        continue
                    if record is not None:
                        yield record
        except (OSError, UnicodeDecodeError) as e:
            raise TraceError(f"cannot read trace {self.path}: {e}") from e


def read_trace(path, strict=False):
    """Load the whole trace up front so a read failure leaves no partial run."""
    reader = TraceReader(path, strict=strict)
    return list(reader), reader.skipped
