"""Logger owning one open file.

Demonstrates:
- The single-resource case: open = create, write = update, close = remove
- Double close and write-after-close rejected instead of corrupting state
- A logger left open is closed exactly once when its scope ends
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import TextIO

from ownedstore import NotFoundError, OutOfCapacityError, OwnedResource


def _close_file(handle: TextIO) -> None:
    handle.close()


class FileLogger:
    """Appends lines to a file it exclusively owns between open and close."""

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._handle: OwnedResource[TextIO] = OwnedResource(finalizer=_close_file)

    @property
    def is_open(self) -> bool:
        return self._handle.is_open

    def open(self) -> None:
        """Open the file for appending. Raises OutOfCapacityError if already open."""
        handle = self._path.open("a", encoding="utf-8")
        try:
            self._handle.open(handle)
        except OutOfCapacityError:
            handle.close()
            raise

    def write(self, line: str) -> None:
        self._handle.write(lambda f: f.write(line + "\n"))

    def close(self) -> None:
        """Close the file. Raises NotFoundError if it is not open."""
        self._handle.close().close()

    def shutdown(self) -> None:
        """Stop logging for good, closing the file if it is still open."""
        self._handle.shutdown()

    def __enter__(self) -> FileLogger:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


def main() -> None:
    path = Path(tempfile.gettempdir()) / "ownedstore-example.log"
    logger = FileLogger(path)
    logger.open()
    logger.write("started")
    logger.close()

    try:
        logger.close()
    except NotFoundError as e:
        print(f"second close rejected: {e}")

    try:
        logger.write("too late")
    except NotFoundError as e:
        print(f"write after close rejected: {e}")

    with FileLogger(path) as scoped:
        scoped.open()
        scoped.write("left open, closed on exit")

    print(path.read_text(encoding="utf-8"))


if __name__ == "__main__":
    main()
