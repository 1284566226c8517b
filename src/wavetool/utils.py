import os
import tempfile
from pathlib import Path

from wavetool.errors import ResourceError


def write_bytes_atomic(path: Path | str, data: bytes) -> None:
    """Write ``data`` to ``path`` so that readers never see a partial file.

    The bytes go to a temporary file in the destination directory which is
    then renamed over ``path``. On failure the temporary file is removed and
    ``path`` is left as it was.

    Raises:
        ResourceError: If the file cannot be created or written.
    """
    path = Path(path)
    try:
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
    except OSError as e:
        raise ResourceError("Cannot create output file", path) from e

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, path)
    except OSError as e:
        Path(tmp_name).unlink(missing_ok=True)
        raise ResourceError("Cannot write output file", path) from e
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
