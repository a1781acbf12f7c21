"""JSON documents backed by pydantic models.

The config file, the delegate store and the user store are each a single
JSON document validated by a pydantic model. Writes replace the whole
document atomically (temp file + rename), so a server reading the store
while the CLI writes it sees either the old or the new version.

Files are created 0600; directories created along the way are 0700.
"""

from __future__ import annotations

__all__ = [
    "read_json_model",
    "write_json_model",
]

import json
import os
import tempfile
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

FILE_MODE = 0o600
DIR_MODE = 0o700


def read_json_model(
    path: Path,
    model: type[ModelT],
    *,
    what: str,
    hint: str | None = None,
) -> ModelT:
    """Parse *path* as JSON and validate it as *model*.

    Args:
        path: Document location.
        model: Pydantic model describing the document.
        what: Name used in error messages ("config", "delegates", ...).
        hint: Appended to every error message (e.g. how to regenerate the file).

    Returns:
        The validated model.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file cannot be read, is not JSON, or fails validation.
    """
    suffix = f"\n{hint}" if hint else ""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise FileNotFoundError(f"{what.capitalize()} file not found at {path}.{suffix}") from e
    except OSError as e:
        raise ValueError(f"Could not read {what} file {path}: {e}") from e

    try:
        return model.model_validate_json(raw)
    except ValidationError as e:
        problems = [
            f"  - {'.'.join(str(part) for part in err['loc']) or '(document)'}: {err['msg']}"
            for err in e.errors()
        ]
        raise ValueError(f"Invalid {what} file {path}:\n" + "\n".join(problems) + suffix) from e


def write_json_model(path: Path, document: BaseModel) -> None:
    """Atomically replace *path* with *document* serialized as indented JSON.

    Raises:
        OSError: If the directory or file cannot be written.
    """
    _make_private_dirs(path.parent)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(document.model_dump(mode="json"), f, indent=2)
            f.write("\n")
        if os.name == "posix":
            tmp_path.chmod(FILE_MODE)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def _make_private_dirs(directory: Path) -> None:
    # Only directories created here are restricted; existing ones are left alone
    missing: list[Path] = []
    current = directory
    while not current.exists():
        missing.append(current)
        current = current.parent
    for new_dir in reversed(missing):
        new_dir.mkdir(mode=DIR_MODE, exist_ok=True)
