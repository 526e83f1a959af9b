"""Output file helpers shared by the renderer and the merger."""

import os
import tempfile
from pathlib import Path
from typing import Union


def write_atomically(data: bytes, path: Union[str, Path]) -> None:
    """Write bytes to path through a temporary file in the same directory.

    The destination either keeps its previous state or holds the complete
    new content; a half-written file is never visible under its final name.
    """
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.stem}.", suffix=".tmp", dir=path.parent
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
