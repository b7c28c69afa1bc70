"""Storage of write buffer data on disk before it is uploaded."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import BinaryIO

WRITE_BUFFER_FOLDER = Path("worker_tmp") / "write_buffers"


def create_and_write_temp_file(file_name: str, data: bytes) -> None:
    """Write ``data`` to ``file_name`` inside the write buffer folder."""
    WRITE_BUFFER_FOLDER.mkdir(mode=0o777, parents=True, exist_ok=True)
    (WRITE_BUFFER_FOLDER / file_name).write_bytes(data)


def open_temp_file(file_name: str) -> BinaryIO:
    """Open a file from the write buffer folder for reading."""
    return open(WRITE_BUFFER_FOLDER / file_name, "rb")


def remove_temp_files_directory() -> None:
    """Remove the write buffer folder and everything in it."""
    shutil.rmtree(WRITE_BUFFER_FOLDER, ignore_errors=False) if WRITE_BUFFER_FOLDER.exists() else None