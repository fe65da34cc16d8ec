"""
File-backed schedule store: one JSON document per professional.
"""

import asyncio
import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import List

from ..domain.exceptions import FormatError, InvalidProfessionalIdError, ScheduleNotFoundError
from .records import ScheduleDocument

logger = logging.getLogger(__name__)

_PROFESSIONAL_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]{0,127}$")


class JsonScheduleStore:
    """
    Stores each professional's schedule document as ``<id>.json``.

    Documents are replaced wholesale: a save writes a temporary file in the
    same directory and renames it over the previous version.
    """

    def __init__(self, directory: Path):
        """
        Initialize the store.

        Args:
            directory: Folder holding the schedule documents (created on save)
        """
        self.directory = Path(directory)

    def _path_for(self, professional_id: str) -> Path:
        if not _PROFESSIONAL_ID_RE.match(professional_id or "") or ".." in professional_id:
            raise InvalidProfessionalIdError(f"Invalid professional id: '{professional_id}'")
        return self.directory / f"{professional_id}.json"

    async def load(self, professional_id: str) -> ScheduleDocument:
        """
        Load a professional's schedule document.

        Raises:
            ScheduleNotFoundError: If no document exists
            FormatError: If the file is not a valid schedule document
        """
        path = self._path_for(professional_id)
        return await asyncio.to_thread(self._read, professional_id, path)

    def _read(self, professional_id: str, path: Path) -> ScheduleDocument:
        if not path.exists():
            raise ScheduleNotFoundError(f"No schedule stored for professional '{professional_id}'")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise FormatError(f"Invalid JSON in {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise FormatError(f"Schedule file {path} must contain a JSON object.")

        document = ScheduleDocument.from_wire(data)
        if document.professional_id != professional_id:
            logger.warning(
                "Schedule file %s names professional '%s', expected '%s'",
                path, document.professional_id, professional_id,
            )
        return document

    async def save(self, document: ScheduleDocument) -> None:
        """Atomically replace a professional's schedule document."""
        path = self._path_for(document.professional_id)
        await asyncio.to_thread(self._write, path, document)

    def _write(self, path: Path, document: ScheduleDocument) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document.to_wire(), f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.debug("Saved schedule for '%s' to %s", document.professional_id, path)

    def list_professionals(self) -> List[str]:
        """Return the ids of all stored professionals, sorted."""
        if not self.directory.exists():
            return []
        return sorted(
            path.stem for path in self.directory.glob("*.json")
            if _PROFESSIONAL_ID_RE.match(path.stem)
        )
