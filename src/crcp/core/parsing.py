"""Decoders for the git output shapes the workflow reads.

Each decoder owns exactly one output shape:

- parse_remote_listing: `git remote -v`
- parse_commit_log: `git log --pretty=format:%ad | %an | %s | %h`
- parse_unmerged_paths: `git status --porcelain`

The git gateway returns these outputs as raw text so the decoding rules can
be tested against fixture text without a repository.
"""

import re
from dataclasses import dataclass
from datetime import datetime

from crcp.core.errors import HistoryParseError
from crcp.core.types import CommitRecord

LOG_FIELD_SEPARATOR = " | "
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Two-letter porcelain codes that mark a path as unmerged (see git-status(1))
UNMERGED_STATUS_CODES = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})


@dataclass(frozen=True)
class RemoteEntry:
    """One line of `git remote -v`, URL as configured (not normalized)."""

    name: str
    url: str
    kind: str


def parse_remote_listing(output: str) -> list[RemoteEntry]:
    """Decode `git remote -v` output.

    Each line looks like `lib\\tgit@github.com:acme/lib.git (fetch)`. Lines
    without a tab separator are ignored. The kind is the parenthesized suffix
    without parentheses, or "" when git printed none.
    """
    entries: list[RemoteEntry] = []
    for line in output.splitlines():
        if "\t" not in line:
            continue
        name, rest = line.split("\t", 1)
        parts = rest.split()
        if not parts:
            continue
        url = parts[0]
        kind = ""
        if len(parts) > 1 and parts[-1].startswith("(") and parts[-1].endswith(")"):
            kind = parts[-1][1:-1]
        entries.append(RemoteEntry(name=name.strip(), url=url, kind=kind))
    return entries


def parse_commit_log_line(line: str) -> CommitRecord:
    """Decode one `<date> | <author> | <subject> | <hash>` line.

    The hash is the trailing field and the date the leading one. The subject
    may itself contain the separator, so it is rebuilt from every field
    between the author and the hash.

    Raises:
        HistoryParseError: If the line has fewer than four fields, an empty
            hash, or a date that does not match LOG_DATE_FORMAT
    """
    fields = line.split(LOG_FIELD_SEPARATOR)
    if len(fields) < 4:
        raise HistoryParseError(line, f"expected at least 4 fields, found {len(fields)}")

    date_text = fields[0].strip()
    author = fields[1].strip()
    subject = LOG_FIELD_SEPARATOR.join(fields[2:-1])
    commit_hash = fields[-1].strip()

    if not commit_hash or " " in commit_hash:
        raise HistoryParseError(line, "missing commit hash")

    try:
        date = datetime.strptime(date_text, LOG_DATE_FORMAT)
    except ValueError as e:
        raise HistoryParseError(line, f"invalid date {date_text!r}") from e

    return CommitRecord(hash=commit_hash, author=author, date=date, subject=subject)


def parse_commit_log(output: str) -> list[CommitRecord]:
    """Decode a whole log, preserving git's newest-first order.

    Blank lines are skipped, so an empty history decodes to an empty list.
    """
    return [parse_commit_log_line(line) for line in output.splitlines() if line.strip()]


# Backslash escapes git's quote_c_style emits besides three-digit octal bytes
_C_ESCAPES = {
    b"a": b"\a",
    b"b": b"\b",
    b"t": b"\t",
    b"n": b"\n",
    b"v": b"\v",
    b"f": b"\f",
    b"r": b"\r",
    b'"': b'"',
    b"\\": b"\\",
}
_C_ESCAPE = re.compile(rb'\\([0-7]{3}|[abtnvfr"\\])')


def _unquote_path(path: str) -> str:
    """Undo git's C-style path quoting (`core.quotePath`).

    `"r\\303\\251sum\\303\\251.txt"` decodes to `résumé.txt`. The octal escapes
    are raw bytes of the UTF-8 name, so the body is unescaped as bytes.
    """
    if not (len(path) >= 2 and path.startswith('"') and path.endswith('"')):
        return path

    def replace(match: re.Match[bytes]) -> bytes:
        token = match.group(1)
        if len(token) == 3:
            return bytes([int(token, 8)])
        return _C_ESCAPES[token]

    raw = _C_ESCAPE.sub(replace, path[1:-1].encode("utf-8"))
    return raw.decode("utf-8", errors="surrogateescape")


def parse_unmerged_paths(porcelain: str) -> frozenset[str]:
    """Return the set of unmerged paths in `git status --porcelain` output."""
    unmerged: set[str] = set()
    for line in porcelain.split("\n"):
        if len(line) < 4:
            continue
        status_code = line[:2]
        if status_code in UNMERGED_STATUS_CODES:
            unmerged.add(_unquote_path(line[3:]))
    return frozenset(unmerged)
