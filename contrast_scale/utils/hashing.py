"""SHA-256 hashing for artifact provenance.

Provides:
    - sha256_file(): Hash file contents (lightness table)
    - sha256_string(): Hash a string
    - hash_dict(): Hash a JSON-serializable dict with sorted keys

The lightness table artifact records the hash of the lightness config that
produced it, and the search logs the hash of the table it loaded, so a result
can be traced back to the exact inputs.

Usage:
    from contrast_scale.utils import hashing
    table_hash = hashing.sha256_file("lightness_values.yaml")

Note: Module named `hashing.py` to avoid shadowing builtin `hash()`.
"""

import hashlib
import json
from pathlib import Path
from typing import Union


def sha256_file(path: Union[str, Path], chunk_size: int = 1 << 20) -> str:
    """Compute SHA-256 hash of file contents.

    Parameters
    ----------
    path : Union[str, Path]
        File path
    chunk_size : int
        Read chunk size in bytes, default 1 MB

    Returns
    -------
    str
        SHA-256 hex digest (64 characters)

    Raises
    ------
    FileNotFoundError
        If file doesn't exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    sha256 = hashlib.sha256()
    with open(path, 'rb') as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            sha256.update(chunk)

    return sha256.hexdigest()


def sha256_string(s: str) -> str:
    """Compute SHA-256 hex digest of a string."""
    sha256 = hashlib.sha256()
    sha256.update(s.encode('utf-8'))
    return sha256.hexdigest()


def hash_dict(d: dict) -> str:
    """Compute SHA-256 hash of dictionary (sorted keys).

    Parameters
    ----------
    d : dict
        Dictionary to hash (must be JSON-serializable)

    Returns
    -------
    str
        SHA-256 hex digest

    Examples
    --------
    >>> config_hash = hash_dict(cfg.lightness.model_dump())
    """
    json_str = json.dumps(d, sort_keys=True)
    return sha256_string(json_str)
