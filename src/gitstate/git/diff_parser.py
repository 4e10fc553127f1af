"""Unified diff parser — one DiffRecord per file section.

Understands the output of ``git diff`` (and ``git diff --cached``,
``git diff A B``): mode-only sections, new and deleted files, renames,
and the ``index`` line with or without a trailing mode. Hunk text is kept
verbatim in ``DiffRecord.body``.
"""

from __future__ import annotations

import re
from typing import List, Optional

from gitstate.git.models import DiffRecord, normalize_id

# --- Regex patterns for diff parsing ---

# A C-quoted path as git writes it: "a/tab\there"
_QUOTED = r'"(?:[^"\\]|\\.)*"'
_DIFF_HEADER_RE = re.compile(rf"^diff --git ({_QUOTED}|a/.+?) ({_QUOTED}|b/.+)$")
_OLD_MODE_RE = re.compile(r"^old mode (\d+)")
_NEW_MODE_RE = re.compile(r"^new mode (\d+)")
_NEW_FILE_RE = re.compile(r"^new file mode (.+)$")
_DELETED_FILE_RE = re.compile(r"^deleted file mode (.+)$")
_SIMILARITY_RE = re.compile(r"^similarity index \d+%$")
_RENAME_FROM_RE = re.compile(r"^rename from (.+)$")
_RENAME_TO_RE = re.compile(r"^rename to (.+)$")
_INDEX_RE = re.compile(r"^index ([0-9A-Fa-f]+)\.\.([0-9A-Fa-f]+) ?(.+)?$")


class MalformedDiff(ValueError):
    """Raised when a required section header is missing or garbled."""

    def __init__(self, message: str, line_no: int, line: Optional[str]) -> None:
        self.line_no = line_no
        self.line = line
        where = f"line {line_no}"
        if line is not None:
            where += f": {line!r}"
        super().__init__(f"{message} ({where})")


_OCTAL_RE = re.compile(r"[0-7]{3}")

_C_ESCAPES = {
    "a": 0x07, "b": 0x08, "t": 0x09, "n": 0x0A,
    "v": 0x0B, "f": 0x0C, "r": 0x0D, '"': 0x22, "\\": 0x5C,
}


def unquote_path(path: str) -> str:
    """Undo git's C-style quoting of a header path; plain paths pass through.

    Octal escapes are raw bytes and are decoded together as UTF-8.
    """
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path
    out = bytearray()
    body = path[1:-1]
    i = 0
    while i < len(body):
        ch = body[i]
        if ch != "\\" or i + 1 == len(body):
            out += ch.encode("utf-8")
            i += 1
            continue
        nxt = body[i + 1]
        if nxt in _C_ESCAPES:
            out.append(_C_ESCAPES[nxt])
            i += 2
        elif _OCTAL_RE.match(body, i + 1):
            out.append(int(body[i + 1:i + 4], 8) & 0xFF)
            i += 4
        else:
            out += nxt.encode("utf-8")
            i += 2
    return out.decode("utf-8", errors="replace")


def _strip_prefix(token: str) -> str:
    # "a/x", "b/x" or their quoted forms
    return unquote_path(token)[2:]


class DiffParser:
    """Parse unified diff text into DiffRecord objects.

    Usage::

        records = DiffParser(diff_text).parse()
        for record in records:
            print(record.b_path, record.stats)
    """

    def __init__(self, diff_text: str) -> None:
        self._lines = diff_text.split("\n")
        # Index past which only blank lines remain; the text's trailing
        # newline(s) must not open a section of their own.
        end = len(self._lines)
        while end > 0 and not self._lines[end - 1]:
            end -= 1
        self._end = end

    def parse(self) -> List[DiffRecord]:
        """Return every file section, in input order."""
        records: List[DiffRecord] = []
        idx = 0
        while idx < self._end:
            record, idx = self._parse_section(idx)
            records.append(record)
        return records

    def _line(self, idx: int) -> Optional[str]:
        return self._lines[idx] if idx < self._end else None

    def _parse_section(self, idx: int) -> tuple[DiffRecord, int]:
        header = self._line(idx)
        m = _DIFF_HEADER_RE.match(header or "")
        if not m:
            raise MalformedDiff("expected 'diff --git' header", idx + 1, header)
        a_path, b_path = _strip_prefix(m.group(1)), _strip_prefix(m.group(2))
        idx += 1

        a_mode: Optional[str] = None
        b_mode: Optional[str] = None
        is_new = False
        is_deleted = False

        # --- Pure mode change prefix ---
        line = self._line(idx)
        if line is not None and line.startswith("old mode"):
            om = _OLD_MODE_RE.match(line)
            a_mode = om.group(1) if om else None
            idx += 1
            nm = _NEW_MODE_RE.match(self._line(idx) or "")
            if nm:
                b_mode = nm.group(1)
                idx += 1

        # --- Rename headers ---
        line = self._line(idx)
        if line is not None and _SIMILARITY_RE.match(line):
            idx += 1
            while (line := self._line(idx)) is not None:
                if (rf := _RENAME_FROM_RE.match(line)):
                    a_path = unquote_path(rf.group(1))
                elif (rt := _RENAME_TO_RE.match(line)):
                    b_path = unquote_path(rt.group(1))
                else:
                    break
                idx += 1

        # --- Section without content (mode change, pure rename) ---
        line = self._line(idx)
        if line is None or _DIFF_HEADER_RE.match(line):
            return (
                DiffRecord(a_path=a_path, b_path=b_path, a_mode=a_mode, b_mode=b_mode),
                idx,
            )

        # --- New / deleted file ---
        if line.startswith("new file"):
            nf = _NEW_FILE_RE.match(line)
            b_mode = nf.group(1) if nf else None
            a_mode = None
            is_new = True
            idx += 1
        elif line.startswith("deleted file"):
            df = _DELETED_FILE_RE.match(line)
            a_mode = df.group(1) if df else None
            b_mode = None
            is_deleted = True
            idx += 1

        # --- index <a>..<b> [mode] ---
        line = self._line(idx)
        im = _INDEX_RE.match(line or "")
        if not im:
            raise MalformedDiff("expected 'index' line", idx + 1, line)
        a_id, b_id, trailing_mode = im.group(1), im.group(2), im.group(3)
        if trailing_mode:
            b_mode = trailing_mode.strip()
        idx += 1

        # --- Body: everything up to the next 'diff' line ---
        body_lines: List[str] = []
        while idx < len(self._lines) and not self._lines[idx].startswith("diff"):
            body_lines.append(self._lines[idx])
            idx += 1
        body = "\n".join(body_lines) if any(body_lines) else None

        a_id = normalize_id(a_id)
        b_id = normalize_id(b_id)
        record = DiffRecord(
            a_path=a_path,
            b_path=b_path,
            a_id=a_id,
            b_id=b_id,
            a_mode=a_mode,
            b_mode=b_mode,
            is_new=is_new or a_id is None,
            is_deleted=is_deleted or b_id is None,
            body=body,
        )
        return record, idx


def parse_diff(diff_text: str) -> List[DiffRecord]:
    """Shorthand for ``DiffParser(diff_text).parse()``."""
    return DiffParser(diff_text).parse()
