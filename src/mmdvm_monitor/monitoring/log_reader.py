"""Incremental log reading with truncation and replacement detection.

This module provides the byte-level tail primitive used by the ingestion
engine. A reader remembers the byte offset it has consumed up to, so the
reader that replays a file can keep following it without re-reading or
skipping anything.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

CHECKSUM_BYTES = 16


@dataclass
class LogPosition:
    """Reading position within one log file.

    Attributes:
        file_path: Path of the file being read.
        byte_offset: Offset just past the last consumed line.
        line_number: Number of lines consumed so far.
        checksum: MD5 of the first CHECKSUM_BYTES bytes, empty until the file
            is at least that long.
        last_read_timestamp: ISO 8601 time of the last read, if any.
    """

    file_path: str
    byte_offset: int = 0
    line_number: int = 0
    checksum: str = ""
    last_read_timestamp: str | None = None


class IncrementalLogReader:
    """Reads a log file incrementally without re-reading consumed content.

    Byte offsets track the reading position. A file that shrank below the
    offset (truncation) or whose leading bytes changed (replaced under the
    same name) is read again from the start.

    Incomplete trailing lines are left unconsumed unless the caller asks for
    them, so a line that is still being written is delivered once, whole.
    """

    def __init__(self, log_file_path: str | Path):
        self.path = Path(log_file_path)
        self.position = LogPosition(file_path=str(self.path))

    @property
    def offset(self) -> int:
        return self.position.byte_offset

    def seek_end(self) -> int:
        """Skip existing content; following reads return only appended lines.

        Raises:
            OSError: The file cannot be stat'ed.
        """
        size = self.path.stat().st_size
        self.position.byte_offset = size
        self.position.checksum = self._calculate_checksum()
        logger.debug(f"Positioned {self.path} at end of file (offset {size})")
        return size

    def read_new_lines(self, include_partial: bool = False) -> list[str]:
        """Read complete lines appended since the last read.

        Args:
            include_partial: Also consume a trailing line with no newline.
                Used when a file is read once and not followed afterwards.

        Returns:
            Stripped, non-empty lines in file order.

        Raises:
            OSError: The file cannot be opened or read.
        """
        file_size = self.path.stat().st_size
        offset = self.position.byte_offset
        current_checksum = self._calculate_checksum()

        if offset > file_size:
            logger.warning(
                f"Log file {self.path} was truncated "
                f"(offset {offset} > size {file_size}), reading from start"
            )
            offset = 0
            self.position.line_number = 0
        elif self.position.checksum and current_checksum != self.position.checksum:
            logger.info(
                f"Log file {self.path} was replaced "
                f"(checksum changed from {self.position.checksum} to {current_checksum}), "
                "reading from start"
            )
            offset = 0
            self.position.line_number = 0

        if offset == file_size:
            self.position.byte_offset = offset
            self.position.checksum = current_checksum
            return []

        with self.path.open("rb") as f:
            f.seek(offset)
            data = f.read()

        if include_partial or data.endswith(b"\n"):
            consumed = len(data)
        else:
            # Leave the unfinished line for the next read
            consumed = data.rfind(b"\n") + 1

        lines = []
        for raw in data[:consumed].split(b"\n"):
            line = raw.decode("utf-8", errors="replace").strip()
            if line:
                lines.append(line)

        self.position.byte_offset = offset + consumed
        self.position.line_number += len(lines)
        self.position.checksum = current_checksum
        self.position.last_read_timestamp = datetime.now().isoformat()

        if lines:
            logger.debug(
                f"Read {len(lines)} new lines from {self.path} "
                f"(offset {offset} -> {self.position.byte_offset})"
            )

        return lines

    def _calculate_checksum(self) -> str:
        """MD5 of the first CHECKSUM_BYTES bytes, or "" while the file is shorter.

        Only a small fixed prefix is hashed so appends never change it.

        Raises:
            OSError: The file cannot be opened.
        """
        with self.path.open("rb") as f:
            chunk = f.read(CHECKSUM_BYTES)
        if len(chunk) < CHECKSUM_BYTES:
            return ""
        return hashlib.md5(chunk).hexdigest()

