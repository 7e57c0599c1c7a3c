# tracefile.py
import collections
import enum
import re

class Operation(enum.Enum):
    LOAD = "L"
    STORE = "S"
    MODIFY = "M"

HEX_ADDRESS = re.compile(r"(?:0[xX])?[0-9a-fA-F]+")
DECIMAL = re.compile(r"[0-9]+")

# size is carried along for reporting only
AccessEvent = collections.namedtuple("AccessEvent", ["op", "address", "size"])

INSTRUCTION = "I"

class TraceFormatError(ValueError):
    def __init__(self, lineno, line, reason):
        super().__init__(f"line {lineno}: {reason}: {line.strip()!r}")
        self.lineno = lineno
        self.line = line
        self.reason = reason

def parse_line(text, lineno=0):
    """
    Parse one valgrind-style record such as " L 7ff0003a8,8".
    Returns an AccessEvent, or None for instruction fetches and blank lines.
    """
    stripped = text.strip()
    if not stripped:
        return None

    parts = stripped.split(None, 1)
    op_char = parts[0]
    rest = parts[1] if len(parts) > 1 else ""
    if op_char == INSTRUCTION:
        return None
    try:
        op = Operation(op_char)
    except ValueError:
        raise TraceFormatError(lineno, text, f"unknown operation {op_char!r}") from None

    addr_text, sep, size_text = rest.strip().partition(",")
    if not sep:
        raise TraceFormatError(lineno, text, "expected '<address>,<size>'")
    addr_text = addr_text.strip()
    size_text = size_text.strip()
    if not HEX_ADDRESS.fullmatch(addr_text):
        raise TraceFormatError(lineno, text, f"bad address {addr_text!r}")
    if not DECIMAL.fullmatch(size_text):
        raise TraceFormatError(lineno, text, f"bad size {size_text!r}")
    address = int(addr_text, 16)
    size = int(size_text)
    return AccessEvent(op, address, size)

def iter_events(lines):
    for lineno, line in enumerate(lines, start=1):
        event = parse_line(line, lineno)
        if event is not None:
            yield event

def read_trace(path):
    """Lazily yield AccessEvents from a trace file."""
    with open(path, "r") as f:
        yield from iter_events(f)

def format_event(event):
    return f"{event.op.value} {event.address:x},{event.size}"
