"""Unpacking node log archives onto the host."""

from __future__ import annotations

import logging
import os
import tarfile
from typing import BinaryIO, IO

_log = logging.getLogger(__name__)

_BLOCK_SIZE = 512
_CHUNK_SIZE = 64 * 1024


class UntarError(Exception):
    """Raised when a tar stream cannot be read or unpacked."""


class _PrefixedReader:
    """A reader yielding some already-read bytes before the rest of a stream."""

    def __init__(self, prefix: bytes, rest: BinaryIO) -> None:
        self._prefix = prefix
        self._rest = rest

    def read(self, size: int = -1) -> bytes:
        if not self._prefix:
            return self._rest.read(size)
        if size is None or size < 0:
            data, self._prefix = self._prefix + self._rest.read(), b""
            return data
        data, self._prefix = self._prefix[:size], self._prefix[size:]
        if len(data) < size:
            data += self._rest.read(size - len(data))
        return data


def _read_block(reader: BinaryIO) -> bytes:
    block = b""
    while len(block) < _BLOCK_SIZE:
        chunk = reader.read(_BLOCK_SIZE - len(block))
        if not chunk:
            break
        block += chunk
    return block


def _drain(reader: BinaryIO) -> None:
    while reader.read(_CHUNK_SIZE):
        pass


def _target_path(directory: str, name: str) -> str:
    return os.path.normpath(directory + os.sep + name.replace("/", os.sep))


def _write_regular(archive: tarfile.TarFile, member: tarfile.TarInfo, target: str) -> None:
    try:
        fd = os.open(target, os.O_CREAT | os.O_RDWR, member.mode & 0o7777)
    except OSError as err:
        raise UntarError(f"error opening {target}: {err}") from err
    written = 0
    try:
        with os.fdopen(fd, "r+b") as out:
            source = archive.extractfile(member)
            if source is not None:
                while chunk := source.read(_CHUNK_SIZE):
                    out.write(chunk)
                    written += len(chunk)
    except (OSError, tarfile.TarError) as err:
        raise UntarError(f"error writing to {target}: {err}") from err
    if written != member.size:
        raise UntarError(
            f"only wrote {written} bytes to {target}; expected {member.size}"
        )


def untar(reader: BinaryIO, directory: str) -> None:
    """Unpack the tar stream from reader into directory.

    Regular files and directories are written; other entry types are logged
    and skipped. Existing files are overwritten in place without truncation.
    Any bytes left after the archive are read and discarded.
    """
    first = _read_block(reader)
    if not first or first == bytes(_BLOCK_SIZE):
        _drain(reader)
        return

    try:
        with tarfile.open(fileobj=_PrefixedReader(first, reader), mode="r|") as archive:
            for member in archive:
                target = _target_path(directory, member.name)
                if member.isreg():
                    _write_regular(archive, member, target)
                elif member.isdir():
                    if not os.path.exists(target):
                        try:
                            os.makedirs(target, 0o755, exist_ok=True)
                        except OSError as err:
                            raise UntarError(
                                f"error creating directory {target}: {err}"
                            ) from err
                else:
                    _log.warning(
                        "tar file entry %s contained unsupported file type %r",
                        member.name,
                        member.type,
                    )
    except tarfile.TarError as err:
        raise UntarError(f"tar reading error: {err}") from err
    _drain(reader)


def file_on_host(path: str) -> IO[bytes]:
    """Create (or truncate) the file at path, creating parent directories."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, 0o777, exist_ok=True)
    return open(path, "w+b")