"""Version control system operations for dchangelog."""

import logging
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Tuple, Union

from .errors import CollectionError

logger = logging.getLogger(__name__)


@dataclass
class ChangeSet:
    """Changed files between two revisions, mapped to their unified diffs."""

    base: str
    target: str
    files: Dict[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.files)

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self.files.items())

    @property
    def is_empty(self) -> bool:
        return not self.files

    @property
    def revision_range(self) -> str:
        return f"{self.base}..{self.target}"


def _git_env() -> Dict[str, str]:
    """Get environment variables for predictable git output."""
    env = os.environ.copy()
    env.update(
        {
            "LC_ALL": "C",
            "GIT_TERMINAL_PROMPT": "0",
            "GIT_PAGER": "cat",
        }
    )
    return env


class GitRepository:
    """Git operations against a local working copy."""

    def __init__(self, repo_path: Union[str, Path] = ".", context_lines: int = 3):
        """Initialize with the repository location and diff context size."""
        if context_lines < 0:
            raise ValueError("context_lines cannot be negative")
        self.repo_path = Path(repo_path)
        self.context_lines = context_lines

    def _run_git(
        self,
        args: List[str],
        check: bool = True,
    ) -> subprocess.CompletedProcess:
        """Run git command with output decoding and color disabled."""
        cmd = [
            "git",
            "-c",
            "color.ui=false",
            "-c",
            "core.quotepath=off",
        ] + args
        logger.debug("Running git", extra={"git_args": args})
        return subprocess.run(
            cmd,
            cwd=self.repo_path,
            env=_git_env(),
            check=check,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )

    def validate_git_available(self) -> str:
        """Return the git version string, failing if git cannot run."""
        try:
            result = self._run_git(["--version"])
        except (OSError, subprocess.CalledProcessError) as e:
            raise CollectionError("", "", f"git is not available: {e}") from e
        return result.stdout.strip()

    def list_changed_files(self, base: str, target: str) -> List[str]:
        """List paths that differ between two revisions.

        Any failure here is fatal for the run: without the name list
        there is nothing to render.
        """
        try:
            result = self._run_git(
                ["diff", "--name-only", "-z", "--no-ext-diff", f"{base}..{target}"]
            )
        except OSError as e:
            raise CollectionError(base, target, str(e)) from e
        except subprocess.CalledProcessError as e:
            reason = (e.stderr or "").strip() or f"git exited with status {e.returncode}"
            raise CollectionError(base, target, reason) from e

        # NUL-separated, repository-root-relative and never C-quoted
        return [path for path in result.stdout.split("\0") if path]

    def get_file_diff(self, base: str, target: str, path: str) -> str:
        """Get the unified diff of one path between two revisions.

        Failures are tolerated: whatever git printed (often nothing) is
        returned and a warning is logged.
        """
        diff_args = [
            "diff",
            f"--unified={self.context_lines}",
            "--no-ext-diff",
            f"{base}..{target}",
            "--",
            # Listed paths are relative to the repository root, not repo_path.
            f":(top,literal){path}",
        ]

        try:
            result = self._run_git(diff_args, check=False)
        except OSError as e:
            logger.warning(
                "Diff fetch failed, recording empty diff",
                extra={"path": path, "error": str(e)},
            )
            return ""

        if result.returncode != 0:
            logger.warning(
                "Diff fetch failed, recording partial diff",
                extra={
                    "path": path,
                    "returncode": result.returncode,
                    "stderr": (result.stderr or "").strip(),
                },
            )
        return result.stdout or ""

    def collect_changes(self, base: str, target: str) -> ChangeSet:
        """Collect every changed file and its diff between two revisions."""
        paths = self.list_changed_files(base, target)
        change_set = ChangeSet(base=base, target=target)

        for path in paths:
            change_set.files[path] = self.get_file_diff(base, target, path)

        logger.info(
            "Collected changes",
            extra={"range": change_set.revision_range, "files": len(change_set)},
        )
        return change_set

