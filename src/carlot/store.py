"""JSON file persistence for the dealers and session documents."""

from __future__ import annotations

import json
import os
import stat
import tempfile
from pathlib import Path
from typing import ClassVar, Generic, TypeVar

from pydantic import Field, ValidationError

from .errors import CorruptDocumentError, StorageError
from .logger import get_logger
from .models import CarDealer, Record

logger = get_logger(__name__)


class DealersDocument(Record):
    """Every dealer and its cars; the single source of truth."""

    type: str = "Dealers"
    description: str = "Dealers list"
    dealers: list[CarDealer] = Field(default_factory=list)


class SessionDocument(Record):
    """Which dealer is logged in and whether presence is enabled."""

    type: str = "Session"
    description: str = "Session config"
    dealer_id: str | None = None
    presence: bool = False


DocumentT = TypeVar("DocumentT", bound=Record)


class JsonDocumentStore(Generic[DocumentT]):
    """Load and save one pydantic document as a whole JSON file.

    Every save rewrites the full file. Writes go through a temp file in the
    same directory followed by ``os.replace`` so a crash mid-write keeps the
    previous document. There is no locking: two processes writing the same
    file race and the last writer wins.
    """

    document_type: ClassVar[type[Record]]

    def __init__(self, path: Path | str) -> None:
        """Bind the store to a file path; nothing is touched on disk yet."""
        self.path = Path(path)

    def load(self) -> DocumentT:
        """Return the stored document, creating a default one if the file is absent."""
        self._ensure_file()
        try:
            text = self.path.read_text(encoding="utf-8-sig")
        except UnicodeDecodeError as exc:
            logger.error("Undecodable document at %s: %s", self.path, exc)
            raise CorruptDocumentError(f"{self.path} is not valid UTF-8.") from exc
        except OSError as exc:
            raise StorageError(f"Could not read {self.path}: {exc}") from exc
        try:
            document = self.document_type.model_validate_json(text)
        except ValidationError as exc:
            logger.error("Corrupt document at %s: %s", self.path, exc)
            raise CorruptDocumentError(f"{self.path} is not a valid {self.document_type.__name__}.") from exc
        return document  # type: ignore[return-value]

    def save(self, document: DocumentT) -> None:
        """Serialize and replace the stored document."""
        payload = json.dumps(document.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.chmod(tmp_name, self._file_mode())
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Could not write {self.path}: {exc}") from exc

    def _file_mode(self) -> int:
        """Keep the mode of the file being replaced, else the umask default for new files."""
        try:
            return stat.S_IMODE(self.path.stat().st_mode)
        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return 0o666 & ~umask

    def _ensure_file(self) -> None:
        """Create the parent directory and a default document when the file is missing."""
        if self.path.exists():
            return
        logger.info("Creating default %s at %s", self.document_type.__name__, self.path)
        self.save(self.document_type())  # type: ignore[arg-type]


class DealersStore(JsonDocumentStore[DealersDocument]):
    """Store for ``Dealers.json``."""

    document_type = DealersDocument


class SessionStore(JsonDocumentStore[SessionDocument]):
    """Store for ``Session.json``."""

    document_type = SessionDocument
