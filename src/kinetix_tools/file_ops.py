"""
Safe file operations for Kinetix Tools.

Size-limited source reads and exclusive-create artifact writes.
"""

import logging
from pathlib import Path
from typing import Optional

from .exceptions import FileAccessError
from .security import PathValidator, ResourceLimiter

logger = logging.getLogger(__name__)


def safe_read_file(
    filepath: Path,
    limiter: Optional[ResourceLimiter] = None,
    encoding: str = "utf-8-sig",
    errors: str = "replace",
) -> str:
    """
    Read a source file with a size check.

    Args:
        filepath: File to read
        limiter: Resource limiter (if None, skips size check)
        encoding: Text encoding (utf-8-sig drops the BOM Visual Studio writes)
        errors: How to handle encoding errors

    Returns:
        File contents as string

    Raises:
        FileAccessError: If file cannot be read
        SecurityError: If the file exceeds the size limit
    """
    if limiter:
        limiter.check_file_size(filepath)

    try:
        with open(filepath, encoding=encoding, errors=errors) as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise FileAccessError(filepath, f"Encoding error: {e}")
    except OSError as e:
        raise FileAccessError(filepath, f"OS error: {e}")


class ArtifactWriter:
    """
    Writes generated files into a test project without ever overwriting.

    Args:
        root_dir: Test project directory; writes outside it are refused
        dry_run: Report what would be written without touching the disk
    """

    def __init__(self, root_dir: Path, dry_run: bool = False, encoding: str = "utf-8"):
        self.validator = PathValidator(root_dir)
        self.dry_run = dry_run
        self.encoding = encoding

    def exists(self, relative_path: Path) -> bool:
        """Whether an artifact already exists at ``relative_path`` in the test project."""
        target = self.validator.ensure_within(self.validator.root_dir / relative_path)
        return target.exists()

    def write(self, relative_path: Path, content: str) -> Optional[Path]:
        """
        Create ``relative_path`` with ``content``.

        Returns:
            The written path, or None when the file already exists (or in dry-run mode)

        Raises:
            SecurityError: If the target resolves outside the test project
            FileAccessError: If the file cannot be written
        """
        target = self.validator.ensure_within(self.validator.root_dir / relative_path)

        if self.dry_run:
            logger.info(f"[dry-run] would write {target}")
            return None

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            # Exclusive create: a concurrent or earlier writer wins
            with open(target, "x", encoding=self.encoding) as f:
                f.write(content)
        except FileExistsError:
            logger.debug(f"Skipping {target}: already exists")
            return None
        except OSError as e:
            raise FileAccessError(target, f"Write failed: {e}")

        return target
