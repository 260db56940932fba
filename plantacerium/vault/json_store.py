#!/usr/bin/env python3
"""
json_store.py - Single-file JSON persistence for the note vault

The vault only needs two things from storage: load everything at startup
and save everything on change. The document is a plain mapping

    {
      "2024-03-15-14-30": {"body": "...", "created_at": "...", "updated_at": "..."},
      ...
    }

Writes go to a temp file in the same directory and are moved into place
with os.replace, so a crash mid-write never leaves half a document behind.
Concurrent writers are not coordinated - last writer wins.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Union

from plantacerium.core.errors import VaultCorruptError, VaultError, VaultWriteError

logger = logging.getLogger(__name__)


class JsonVaultStore:
    """
    Raw key -> record mapping on disk. Knows nothing about TemporalKey or
    Entry; decoding and validation of records is the vault's job.

    Usage:
        store = JsonVaultStore("chronos_notes.json")
        records = store.load()
        store.save(records)
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Dict[str, Dict[str, Any]]:
        """
        Read the whole document.

        Returns:
            Mapping of canonical key string -> record dict. A missing file
            is an empty archive, not an error.

        Raises:
            VaultCorruptError: file exists but is not a JSON object of objects
            VaultError: file exists but cannot be read
        """
        if not self.path.exists():
            logger.info(f"No vault file at {self.path}, starting with an empty archive")
            return {}

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise VaultError(f"could not read {self.path}: {e}") from e

        if not raw.strip():
            return {}

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise VaultCorruptError(f"{self.path} is not valid JSON: {e}") from e

        if not isinstance(document, dict):
            raise VaultCorruptError(f"{self.path} must hold a JSON object, found {type(document).__name__}")

        for key, record in document.items():
            if not isinstance(record, dict):
                raise VaultCorruptError(f"record {key!r} in {self.path} is not an object")

        logger.info(f"Loaded {len(document)} records from {self.path}")
        return document

    def save(self, records: Dict[str, Dict[str, Any]]):
        """
        Atomically replace the document with `records`.

        Raises:
            VaultWriteError: serialization or any filesystem step failed
        """
        try:
            payload = json.dumps(records, indent=2, ensure_ascii=False, sort_keys=True)
        except (TypeError, ValueError) as e:
            raise VaultWriteError(f"could not serialize vault: {e}") from e

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.write("\n")
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            raise VaultWriteError(f"could not write {self.path}: {e}") from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        logger.debug(f"Saved {len(records)} records to {self.path}")
