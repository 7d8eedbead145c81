"""
File Utilities Module
Common file operations and path handling functions.
"""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Dict

UNSAFE_FILENAME_CHARS = re.compile(r'[^A-Za-z0-9_-]')


def ensure_directory(directory: Path) -> None:
    """Ensure directory exists, create if necessary."""
    directory.mkdir(parents=True, exist_ok=True)


def sanitize_filename(name: str) -> str:
    """Replace every character outside [A-Za-z0-9_-] with an underscore."""
    return UNSAFE_FILENAME_CHARS.sub('_', name)


def write_json_atomic(path: Path, data: Any) -> None:
    """
    Write JSON with sorted keys so repeated extractions diff cleanly.

    The payload goes to a temporary file in the same directory first and is
    then moved over ``path``, so readers never see a half-written file.

    Raises:
        OSError: If the directory is not writable
    """
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix='.tmp', dir=path.parent)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, sort_keys=True)
            f.write('\n')
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def read_json_file(file_path: Path) -> Dict[str, Any]:
    """
    Read a JSON object from disk.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the content is not a JSON object
    """
    with open(file_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{file_path} does not contain a JSON object")
    return data
