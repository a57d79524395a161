"""
Output Writers - Where generated source goes.

Output for insurance line `BOP` named `JavaBOPRatingDriver.java` lands at
`<root>/BOP/JavaBOPRatingDriver.java`. Text is written as generated; line
terminators are not translated.
"""

import os
import tempfile
from pathlib import Path
from threading import Lock
from typing import Protocol, runtime_checkable

from genowa.observability import get_logger


logger = get_logger("output")


def output_relative_path(ins_line_cd: str, file_name: str) -> Path:
    """Relative path of one generated file."""
    if not file_name:
        raise ValueError("Output file name is empty")
    relative = Path(ins_line_cd) / file_name if ins_line_cd else Path(file_name)
    if relative.is_absolute() or ".." in relative.parts:
        raise ValueError(f"Output path escapes the output root: {relative}")
    return relative


@runtime_checkable
class OutputWriter(Protocol):
    """
    Protocol for output sinks.
    """

    def write(self, ins_line_cd: str, file_name: str, text: str) -> str:
        """Store one generated file; returns where it went."""
        ...


class FileOutputWriter:
    """
    Writes generated files under a root directory.

    Each file is written to a temporary sibling and renamed into place, so
    readers never see a half-written file.
    """

    def __init__(self, root: str | Path, encoding: str = "utf-8"):
        self.root = Path(root)
        self.encoding = encoding

    def path_for(self, ins_line_cd: str, file_name: str) -> Path:
        return self.root / output_relative_path(ins_line_cd, file_name)

    def write(self, ins_line_cd: str, file_name: str, text: str) -> str:
        path = self.path_for(ins_line_cd, file_name)
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding=self.encoding, newline="") as f:
                f.write(text)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info("Wrote %s (%d bytes)", path, len(text.encode(self.encoding)))
        return str(path)


class InMemoryOutputWriter:
    """
    Keeps generated files in a dict keyed by relative path (dry runs, tests).
    """

    def __init__(self):
        self.files: dict[str, str] = {}
        self._lock = Lock()

    def write(self, ins_line_cd: str, file_name: str, text: str) -> str:
        key = output_relative_path(ins_line_cd, file_name).as_posix()
        with self._lock:
            self.files[key] = text
        return key

    def get(self, ins_line_cd: str, file_name: str) -> str | None:
        key = output_relative_path(ins_line_cd, file_name).as_posix()
        with self._lock:
            return self.files.get(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self.files)
