"""Pytest configuration and fixtures for dchangelog tests."""

import json
import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Generator, List, Tuple

import fitz  # PyMuPDF
import pytest

GIT_IDENTITY = {
    "GIT_AUTHOR_NAME": "Test User",
    "GIT_AUTHOR_EMAIL": "test@example.com",
    "GIT_COMMITTER_NAME": "Test User",
    "GIT_COMMITTER_EMAIL": "test@example.com",
}


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp(prefix="dchangelog_test_"))
    try:
        yield temp_path
    finally:
        if temp_path.exists():
            shutil.rmtree(temp_path, ignore_errors=True)


class GitRepoHelper:
    """Helper class for git repository operations in tests."""

    def __init__(self, repo_path: Path):
        self.repo_path = repo_path
        self.env = os.environ.copy()
        self.env.update(GIT_IDENTITY)

    def run_git(self, args: List[str]) -> subprocess.CompletedProcess:
        """Run git command in the repository."""
        return subprocess.run(
            ["git"] + args,
            cwd=self.repo_path,
            env=self.env,
            check=True,
            capture_output=True,
            text=True,
        )

    def create_file(self, path: str, content: str) -> None:
        """Create a file with content."""
        file_path = self.repo_path / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")

    def delete_file(self, path: str) -> None:
        """Delete a file."""
        file_path = self.repo_path / path
        if file_path.exists():
            file_path.unlink()

    def create_binary_file(self, path: str) -> None:
        """Create a binary file."""
        file_path = self.repo_path / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        # PNG header
        file_path.write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01")

    def add_and_commit(self, message: str) -> str:
        """Add everything and create a commit, return commit SHA."""
        self.run_git(["add", "-A"])
        self.run_git(["commit", "-m", message])
        return self.run_git(["rev-parse", "HEAD"]).stdout.strip()

    def checkout(self, branch: str, create: bool = False) -> None:
        """Switch to a branch, optionally creating it."""
        self.run_git(["checkout", "-b", branch] if create else ["checkout", branch])


@pytest.fixture
def git_repo(temp_dir: Path) -> Generator[Path, None, None]:
    """Create a temporary git repository whose first commit is on main."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()
    helper = GitRepoHelper(repo_path)

    helper.run_git(["init"])
    helper.run_git(["symbolic-ref", "HEAD", "refs/heads/main"])
    helper.run_git(["config", "user.name", "Test User"])
    helper.run_git(["config", "user.email", "test@example.com"])
    helper.run_git(["config", "commit.gpgsign", "false"])

    helper.create_file("README.md", "# Test Repository\n")
    helper.add_and_commit("Initial commit")

    yield repo_path


@pytest.fixture
def git_helper(git_repo: Path) -> GitRepoHelper:
    """Create a git repository helper."""
    return GitRepoHelper(git_repo)


@pytest.fixture
def feature_repo(git_helper: GitRepoHelper) -> GitRepoHelper:
    """Repository where branch feature rewrites a.txt from 'world' to 'hello'."""
    git_helper.create_file("a.txt", "world\n")
    git_helper.add_and_commit("Add a.txt")
    git_helper.checkout("feature", create=True)
    git_helper.create_file("a.txt", "hello\n")
    git_helper.add_and_commit("Say hello")
    git_helper.checkout("main")
    return git_helper


@pytest.fixture
def config_file(temp_dir: Path) -> Path:
    """Configuration with a developer name and a project label."""
    path = temp_dir / "tsd.json"
    path.write_text(
        json.dumps({"developer": {"name": "Alice"}, "project": {"title": "Demo"}}),
        encoding="utf-8",
    )
    return path


def make_pdf(path: Path, *page_texts: str) -> Path:
    """Write a PDF with one page per text."""
    doc = fitz.open()
    for text in page_texts:
        page = doc.new_page()
        page.insert_text((72, 72), text)
    doc.save(str(path))
    doc.close()
    return path


@pytest.fixture
def pdf_factory() -> Callable[..., Path]:
    """Create small PDF documents for merge tests."""
    return make_pdf


def extract_spans(path: Path) -> List[Tuple[str, int]]:
    """Return (text, sRGB color) for every text span of a PDF."""
    spans = []
    with fitz.open(str(path)) as doc:
        for page in doc:
            for block in page.get_text("dict")["blocks"]:
                for line in block.get("lines", []):
                    for span in line["spans"]:
                        spans.append((span["text"], span["color"]))
    return spans


@pytest.fixture
def pdf_spans() -> Callable[[Path], List[Tuple[str, int]]]:
    """Extract colored text spans from a rendered PDF."""
    return extract_spans
