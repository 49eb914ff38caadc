"""
Security utilities for Kinetix Tools.

Provides path containment checks for generated artifacts and size limits
for analyzed sources.
"""

import os
from pathlib import Path

from .exceptions import InvalidPathError, SecurityError

# Maximum source file size in bytes (default 5MB)
DEFAULT_MAX_FILE_SIZE = 5 * 1024 * 1024


class PathValidator:
    """
    Keeps written paths inside a root directory.

    Prevents:
    - Directory traversal through ``..`` segments in derived file names
    - Symlink escape out of the root
    """

    def __init__(self, root_dir: Path):
        """
        Initialize path validator.

        Args:
            root_dir: Directory that every validated path must stay within
        """
        self.root_dir = root_dir.resolve()

    def ensure_within(self, path: Path) -> Path:
        """
        Validate that a (possibly not yet existing) path stays inside the root.

        Args:
            path: Path to validate

        Returns:
            Resolved absolute path

        Raises:
            SecurityError: If the path resolves outside the root directory
        """
        try:
            resolved_path = path.resolve()
        except (OSError, RuntimeError) as e:
            raise SecurityError(f"Cannot resolve path: {e}", filepath=path)

        try:
            resolved_path.relative_to(self.root_dir)
        except ValueError:
            raise SecurityError(
                "Path traversal detected: path is outside the test project",
                filepath=resolved_path,
            )

        return resolved_path


class ResourceLimiter:
    """
    Enforces the source size limit during analysis.
    """

    def __init__(self, max_file_size: int = DEFAULT_MAX_FILE_SIZE):
        self.max_file_size = max_file_size

    def check_file_size(self, filepath: Path) -> None:
        """
        Check if file size is within limits.

        Raises:
            InvalidPathError: If the file cannot be inspected
            SecurityError: If file exceeds size limit
        """
        try:
            size = filepath.stat().st_size
        except OSError as e:
            raise InvalidPathError(filepath, f"Cannot stat file: {e}")

        if size > self.max_file_size:
            size_mb = size / (1024 * 1024)
            limit_mb = self.max_file_size / (1024 * 1024)
            raise SecurityError(
                f"File size ({size_mb:.2f}MB) exceeds limit ({limit_mb:.2f}MB)",
                filepath=filepath,
            )


def validate_solution_path(path: Path) -> Path:
    """
    Validate that a solution file can be loaded.

    Args:
        path: Path to a .sln file

    Returns:
        Resolved absolute path

    Raises:
        InvalidPathError: If path is missing, not a file, not readable or not a .sln
    """
    try:
        resolved = path.resolve()
    except (OSError, RuntimeError) as e:
        raise InvalidPathError(path, f"Cannot resolve path: {e}")

    if not resolved.exists():
        raise InvalidPathError(resolved, "Solution file does not exist")

    if not resolved.is_file():
        raise InvalidPathError(resolved, "Path is not a file")

    if resolved.suffix.lower() != ".sln":
        raise InvalidPathError(resolved, "Expected a .sln solution file")

    if not os.access(resolved, os.R_OK):
        raise InvalidPathError(resolved, "Solution file is not readable")

    return resolved
