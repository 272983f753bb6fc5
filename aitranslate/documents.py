"""String catalog loading, encoding and checkpointing."""

from __future__ import annotations

import json
import pathlib
from typing import Optional

from .errors import CatalogFormatError, ErrorCategory, PersistenceError
from .policy import ErrorPolicy
from .structures import StringsCatalog

BACKUP_SUFFIX = ".original"


def load_catalog(path: pathlib.Path) -> StringsCatalog:
    """Read and decode a string catalog from disk."""

    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise CatalogFormatError(f"Input file not found: {path}") from exc
    except OSError as exc:
        raise CatalogFormatError(f"Input file could not be read: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise CatalogFormatError(f"Input file is not valid UTF-8: {exc.reason}.") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CatalogFormatError(
            f"Input file is not valid JSON ({exc.msg} at line {exc.lineno})."
        ) from exc
    return StringsCatalog.from_dict(data)


def encode_catalog(catalog: StringsCatalog) -> str:
    """Serialise a catalog deterministically.

    Keys are sorted so that repeated runs produce diffable output, and the
    separators follow the layout Xcode writes.
    """

    return (
        json.dumps(
            catalog.to_dict(),
            ensure_ascii=False,
            indent=2,
            sort_keys=True,
            separators=(",", " : "),
        )
        + "\n"
    )


def backup_path_for(path: pathlib.Path) -> pathlib.Path:
    return path.with_name(path.name + BACKUP_SUFFIX)


def backup_file(path: pathlib.Path) -> pathlib.Path:
    """Move ``path`` to its ``.original`` sibling, replacing an older backup."""

    destination = backup_path_for(path)
    if destination.exists():
        destination.unlink()
    path.replace(destination)
    return destination


class CheckpointWriter:
    """Writes the whole catalog back to its input location.

    The previous file is moved aside before the first write of a run only,
    not before every checkpoint, so the backup always holds the catalog as it
    was before translation started rather than an intermediate checkpoint.
    """

    def __init__(
        self,
        path: pathlib.Path,
        *,
        skip_backup: bool = False,
        error_policy: Optional[ErrorPolicy] = None,
        verbose: bool = False,
    ) -> None:
        self.path = path
        self.skip_backup = skip_backup
        self.error_policy = error_policy
        self.verbose = verbose
        self.writes = 0
        self._backed_up = False

    def persist(self, catalog: StringsCatalog) -> None:
        """Write a checkpoint, raising :class:`PersistenceError` on failure."""

        content = encode_catalog(catalog)

        if not self.skip_backup and not self._backed_up:
            self._backup()

        try:
            self.path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(
                f"Could not write checkpoint to {self.path}: {exc}"
            ) from exc
        self.writes += 1
        if self.verbose:
            print(f"[💾] Saved {self.path}")

    def _backup(self) -> None:
        # Backups are best effort; a failure here never stops the write.
        self._backed_up = True
        if not self.path.exists():
            return
        try:
            destination = backup_file(self.path)
        except OSError as exc:
            if self.error_policy is not None:
                self.error_policy.handle_error(
                    ErrorCategory.BACKUP,
                    f"Could not back up {self.path}; continuing without a backup.",
                    details=str(exc),
                )
            return
        if self.verbose:
            print(f"[🗄️] Backed up original to {destination}")
