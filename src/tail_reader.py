"""Incremental, offset-tracked reading of an append-only log file."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO, Iterator, List, Union

from errors import StartupError, TailReadError

logger = logging.getLogger(__name__)


class TailReader:
    """
    Remembers a byte offset into a file and hands back the lines appended
    since the last poll. Content present when the reader is opened is never
    replayed.
    """

    def __init__(self, path: Path, handle: BinaryIO, offset: int, encoding: str = "utf-8"):
        self._path = path
        self._handle = handle
        self._offset = offset
        self._encoding = encoding
        # Bytes after the last newline, waiting for the rest of their line.
        self._pending = b""

    @classmethod
    def open(cls, path: Union[str, Path], encoding: str = "utf-8") -> "TailReader":
        path = Path(path)
        try:
            handle = path.open("rb")
        except OSError as exc:
            raise StartupError(f"Could not open log file {path}", underlying=exc) from exc
        try:
            offset = os.fstat(handle.fileno()).st_size
        except OSError as exc:
            handle.close()
            raise StartupError(f"Could not stat log file {path}", underlying=exc) from exc
        logger.debug("Opened %s at offset %s", path, offset)
        return cls(path, handle, offset, encoding=encoding)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def closed(self) -> bool:
        return self._handle.closed

    def poll_new_lines(self) -> Iterator[str]:
        """
        Read everything appended since the last call and return an iterator
        over the complete lines, in file order.

        On truncation (or when the path now names a different file) the
        offset jumps to the current end and nothing is returned. The offset
        only moves after a successful read.
        """
        try:
            path_stat = os.stat(self._path)
            handle_stat = os.fstat(self._handle.fileno())
        except OSError as exc:
            raise TailReadError(f"Could not stat log file {self._path}", underlying=exc) from exc

        if _is_different_file(path_stat, handle_stat):
            self._reopen()
            return iter(())

        length = handle_stat.st_size
        if length < self._offset:
            logger.info(
                "Log file %s truncated from %s to %s bytes; resuming at end",
                self._path, self._offset, length,
            )
            self._offset = length
            self._pending = b""
            return iter(())
        if length == self._offset:
            return iter(())

        try:
            self._handle.seek(self._offset)
            data = self._handle.read(length - self._offset)
        except OSError as exc:
            raise TailReadError(f"Could not read log file {self._path}", underlying=exc) from exc

        self._offset += len(data)
        chunks = (self._pending + data).split(b"\n")
        self._pending = chunks.pop()
        logger.debug("Read %s bytes (%s lines) from %s", len(data), len(chunks), self._path)
        return self._decode(chunks)

    def close(self) -> None:
        if not self._handle.closed:
            self._handle.close()
            logger.debug("Closed %s", self._path)

    def __enter__(self) -> "TailReader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _decode(self, chunks: List[bytes]) -> Iterator[str]:
        for raw in chunks:
            yield raw.rstrip(b"\r").decode(self._encoding, errors="replace")

    def _reopen(self) -> None:
        try:
            handle = self._path.open("rb")
        except OSError as exc:
            raise TailReadError(f"Could not reopen log file {self._path}", underlying=exc) from exc
        try:
            length = os.fstat(handle.fileno()).st_size
        except OSError as exc:
            handle.close()
            raise TailReadError(f"Could not stat log file {self._path}", underlying=exc) from exc
        logger.info("Log file %s was replaced; resuming at end (%s bytes)", self._path, length)
        self._handle.close()
        self._handle = handle
        self._offset = length
        self._pending = b""


def _is_different_file(path_stat: os.stat_result, handle_stat: os.stat_result) -> bool:
    # st_ino is 0 on filesystems that do not report it.
    if not path_stat.st_ino or not handle_stat.st_ino:
        return False
    return (path_stat.st_ino, path_stat.st_dev) != (handle_stat.st_ino, handle_stat.st_dev)
