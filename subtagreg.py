"""
subtagreg.py.

Read records out of the IANA language-subtag-registry and print the ones
that match a set of field filters.

https://www.iana.org/assignments/language-subtag-registry/language-subtag-registry
"""
import re
import enum
import json

FILE_DATE = 'File-Date:'
RECORD_SEP = '%%'
CONTINUATION = '  '
FIELD_DELIM = ': '
# joins repeated fields (e.g., several Description lines) into one value
FIELD_SEP = ' ::<sep>:: '

_FIELD_COLOR = '\x1b[93m'
_HIT_COLOR = '\x1b[1;31m'
_DONE_COLOR = '\x1b[32m'
_RESET = '\x1b[m'


class RegistryFormatError(ValueError):
    pass


class Chunk(enum.IntEnum):
    FileDate = 1
    Record = 2


class RenderConfig(object):
    def __init__(self, color=False, highlight=True, json=False):
        self._color = bool(color)
        self._highlight = bool(highlight)
        self._json = bool(json)

    @property
    def color(self):
        return self._color

    @color.setter
    def color(self, value):
        self._color = bool(value)

    @property
    def highlight(self):
        """Only meaningful with color on"""
        return self._highlight and self._color

    @highlight.setter
    def highlight(self, value):
        self._highlight = bool(value)

    @property
    def json(self):
        return self._json

    @json.setter
    def json(self, value):
        self._json = bool(value)


def read_records(lines):
    """
    Yield (Chunk, value) pairs from registry lines.

    The File-Date header comes out as (Chunk.FileDate, line); every
    %%-delimited block comes out as (Chunk.Record, [raw field lines]),
    with continuation lines already folded into the field they extend.
    """
    record = []
    for line in lines:
        line = line.rstrip('\r\n')
        if not line:
            continue
        if line.startswith(FILE_DATE):
            yield Chunk.FileDate, line
        elif line.startswith(RECORD_SEP):
            if record:
                yield Chunk.Record, record
            record = []
        elif line.startswith(CONTINUATION):
            if not record:
                raise RegistryFormatError(
                    "Continuation with no field to extend: {!r}".format(line))
            # two leading spaces collapse into one
            record[-1] += line[1:]
        else:
            record.append(line)
    if record:
        yield Chunk.Record, record


def split_field(line):
    idx = line.find(FIELD_DELIM)
    if idx == -1:
        raise RegistryFormatError("Failed on line {!r}".format(line))
    return line[:idx], line[(idx+len(FIELD_DELIM)):]


def fold_record(record):
    """Map each field name to its value; repeated fields are merged."""
    xdict = {}
    for line in record:
        key, val = split_field(line)
        if key in xdict:
            xdict[key] = xdict[key] + FIELD_SEP + val
        else:
            xdict[key] = val
    return xdict


def field_matches(value, pattern):
    value = value.casefold()
    pattern = pattern.casefold()
    if pattern.startswith('='):
        return value == pattern[1:]
    return pattern in value


def matches(record, filters):
    folded = fold_record(record)
    found = 0
    for key, pattern in filters.items():
        value = folded.get(key, None)
        if value is not None and field_matches(value, pattern):
            found += 1
    return found == len(filters)


def _highlight(value, pattern):
    if not pattern or pattern.startswith('='):
        return value
    rx = re.compile(re.escape(pattern), re.IGNORECASE)
    return rx.sub(lambda m: _HIT_COLOR + m.group(0) + _RESET, value)


def render(record, cfg, filters=None, outfile=None):
    filters = filters or {}
    print(RECORD_SEP, file=outfile)
    for line in record:
        key, val = split_field(line)
        if cfg.color:
            if cfg.highlight and key in filters:
                val = _highlight(val, filters[key])
            print("  {}{}:{} {}".format(_FIELD_COLOR, key, _RESET, val),
                  file=outfile)
        else:
            print("  {}: {}".format(key, val), file=outfile)


def render_json(record, outfile=None):
    xdict = {}
    for line in record:
        key, val = split_field(line)
        xdict.setdefault(key, []).append(val)
    print(json.dumps(xdict, ensure_ascii=False), file=outfile)


def scan(lines, filters, cfg, outfile=None):
    """
    Single pass over the registry: echo the File-Date line and print
    every record that satisfies all filters, in file order.

    Returns the number of records printed.
    """
    nmatched = 0
    for kind, value in read_records(lines):
        if kind == Chunk.FileDate:
            if not cfg.json:
                print(value, file=outfile)
            continue
        if not matches(value, filters):
            continue
        nmatched += 1
        if cfg.json:
            render_json(value, outfile)
        else:
            render(value, cfg, filters, outfile)

    if not cfg.json:
        print(RECORD_SEP, file=outfile)
        if cfg.color:
            print("{}DONE!{}".format(_DONE_COLOR, _RESET), file=outfile)
        else:
            print("DONE!", file=outfile)
    return nmatched
