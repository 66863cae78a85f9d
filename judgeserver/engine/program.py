import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

PROGRAM_SUFFIX = '.py'


@contextmanager
def scoped_program(source: bytes, directory: Path) -> Iterator[Path]:
    """Writes ``source`` to a uniquely named file in ``directory`` and deletes it on exit."""
    directory.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(suffix=PROGRAM_SUFFIX, prefix='submission_', dir=directory)
    path = Path(name)
    try:
        with os.fdopen(fd, mode='wb') as f:
            f.write(source)
        yield path
    finally:
        path.unlink(missing_ok=True)
