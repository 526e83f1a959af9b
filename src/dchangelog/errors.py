"""Error definitions and handling for dchangelog."""

from typing import Any, Dict, Optional


class ChangelogError(Exception):
    """Base exception for dchangelog errors."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize error with code, message, and optional details."""
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging."""
        result = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class UsageError(ChangelogError):
    """Command line arguments are missing or invalid."""

    def __init__(self, reason: str, usage: str):
        super().__init__(
            code="USAGE_ERROR",
            message=reason,
            details={"usage": usage},
        )
        self.usage = usage


class ConfigLoadError(ChangelogError):
    """Configuration file could not be read or parsed."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Failed to load config {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class CollectionError(ChangelogError):
    """Listing the changed files between two revisions failed."""

    def __init__(self, base: str, target: str, reason: str):
        where = f" between {base} and {target}" if base or target else ""
        super().__init__(
            code="COLLECTION_FAILED",
            message=f"Failed to collect changes{where}: {reason}",
            details={"base": base, "target": target, "reason": reason},
        )


class RenderError(ChangelogError):
    """Document construction or output write failed."""

    def __init__(self, output_path: str, reason: str):
        super().__init__(
            code="RENDER_FAILED",
            message=f"Failed to render {output_path}: {reason}",
            details={"output_path": output_path, "reason": reason},
        )


class MergeError(ChangelogError):
    """Merging documents failed."""

    def __init__(self, folder: str, reason: str):
        super().__init__(
            code="MERGE_FAILED",
            message=f"Error merging PDFs in {folder}: {reason}",
            details={"folder": folder, "reason": reason},
        )


class NoInputDocumentsError(MergeError):
    """The merge folder contains no PDF documents."""

    def __init__(self, folder: str):
        ChangelogError.__init__(
            self,
            code="NO_INPUT_DOCUMENTS",
            message=f"no input documents found in {folder}",
            details={"folder": folder, "pattern": "*.pdf"},
        )
