"""
Git client infrastructure for docclone.

Provides a clean abstraction over git command execution.
All git invocations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from the materialization logic

Each method maps to exactly one external command. Commands run to
completion before the method returns; nothing here runs concurrently.
"""

import subprocess
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple
from pathlib import Path
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GitResult:
    """Result of a single git invocation."""
    args: Tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def diagnostic(self) -> str:
        """Error text: stderr, or stdout when stderr is empty."""
        text = self.stderr.strip() or self.stdout.strip()
        return text or f"git exited with status {self.returncode}"


class GitCommandError(Exception):
    """A git command exited non-zero, timed out, or could not be started."""

    def __init__(self, result: GitResult):
        super().__init__(f"Git command failed: {result.diagnostic}")
        self.result = result

    @property
    def diagnostic(self) -> str:
        return self.result.diagnostic


def escape_sparse_pattern(path: str) -> str:
    """
    Turn a repository-relative file path into an anchored, literal
    non-cone sparse-checkout pattern.
    """
    escaped = []
    for char in path:
        if char in '\\*?[]':
            escaped.append('\\' + char)
        else:
            escaped.append(char)
    return '/' + ''.join(escaped)


class GitClient:
    """
    Abstraction over git commands.

    Example:
        client = GitClient()
        client.init("/tmp/repo")
        files = client.ls_tree("/tmp/repo")
    """

    def __init__(self, executable: str = "git", timeout: Optional[float] = None):
        """
        Initialize GitClient.

        Args:
            executable: Name or path of the git binary
            timeout: Per-command timeout in seconds (None waits forever)
        """
        self.executable = executable
        self.timeout = timeout or None

    @classmethod
    def from_config(cls, config: dict) -> 'GitClient':
        git_config = config.get("git", {})
        return cls(
            executable=git_config.get("executable", "git"),
            timeout=git_config.get("timeout_seconds") or None
        )

    def run(
        self,
        args: Sequence[str],
        cwd: str,
        check: bool = True,
        input_text: Optional[str] = None
    ) -> GitResult:
        """
        Run a git command.

        Args:
            args: Arguments after the git executable
            cwd: Working directory
            check: Raise GitCommandError on non-zero exit
            input_text: Text written to the command's stdin

        Returns:
            GitResult with captured output
        """
        cmd = [self.executable, *args]
        logger.debug(f"Running: {' '.join(cmd)} (cwd={cwd})")

        try:
            completed = subprocess.run(
                cmd,
                cwd=cwd,
                input=input_text,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            result = GitResult(tuple(args), -1, "", f"Git command timed out after {self.timeout}s: {' '.join(cmd)}")
            raise GitCommandError(result)
        except OSError as e:
            result = GitResult(tuple(args), -1, "", f"Could not run {self.executable}: {e}")
            raise GitCommandError(result) from e

        result = GitResult(
            tuple(args),
            completed.returncode,
            completed.stdout or "",
            completed.stderr or ""
        )

        if check and not result.ok:
            logger.debug(f"git {' '.join(args)} failed: {result.diagnostic}")
            raise GitCommandError(result)

        return result

    def is_git_repo(self, path: str) -> bool:
        """Check if path is a git repository."""
        return (Path(path) / ".git").exists()

    def init(self, path: str) -> GitResult:
        return self.run(["init"], cwd=path)

    def remote_url(self, path: str, remote: str = "origin") -> Optional[str]:
        """
        Get remote URL.

        Returns:
            Remote URL or None if the remote is not configured
        """
        result = self.run(["remote", "get-url", remote], cwd=path, check=False)
        if result.ok and result.stdout.strip():
            return result.stdout.strip()
        return None

    def add_remote(self, path: str, url: str, remote: str = "origin") -> GitResult:
        return self.run(["remote", "add", remote, url], cwd=path)

    def set_remote_url(self, path: str, url: str, remote: str = "origin") -> GitResult:
        return self.run(["remote", "set-url", remote, url], cwd=path)

    def remote_default_branch(self, path: str, remote: str = "origin") -> Optional[str]:
        """
        Ask the remote which branch its HEAD points at.

        Returns:
            Branch name, or None if the remote does not advertise one
        """
        result = self.run(["ls-remote", "--symref", remote, "HEAD"], cwd=path, check=False)
        if not result.ok:
            return None

        for line in result.stdout.splitlines():
            # ref: refs/heads/main\tHEAD
            if line.startswith("ref:") and "\t" in line:
                ref = line[len("ref:"):].split("\t", 1)[0].strip()
                if ref.startswith("refs/heads/"):
                    return ref[len("refs/heads/"):]
        return None

    def fetch_metadata(self, path: str, branch: str, remote: str = "origin", depth: int = 1) -> GitResult:
        """Shallow fetch of commits and trees only; blob content is omitted."""
        return self.run(
            ["fetch", f"--depth={depth}", "--filter=blob:none", remote, branch],
            cwd=path
        )

    def config_get(self, path: str, key: str) -> Optional[str]:
        result = self.run(["config", "--get", key], cwd=path, check=False)
        if result.ok:
            return result.stdout.strip()
        return None

    def config_set(self, path: str, key: str, value: str) -> GitResult:
        return self.run(["config", key, value], cwd=path)

    def enable_sparse_checkout(self, path: str) -> None:
        """
        Enable non-cone sparse checkout with an empty pattern list, so
        checking out a branch materializes no files.
        """
        self.config_set(path, "core.sparseCheckout", "true")
        self.config_set(path, "core.sparseCheckoutCone", "false")

        sparse_file = Path(path) / ".git" / "info" / "sparse-checkout"
        sparse_file.parent.mkdir(parents=True, exist_ok=True)
        sparse_file.write_text("")

    def is_sparse_checkout(self, path: str) -> bool:
        value = self.config_get(path, "core.sparseCheckout")
        return bool(value) and value.lower() == "true"

    def branch_exists(self, path: str, branch: str) -> bool:
        result = self.run(["rev-parse", "--verify", "--quiet", f"refs/heads/{branch}"], cwd=path, check=False)
        return result.ok

    def checkout(self, path: str, branch: str) -> GitResult:
        return self.run(["checkout", branch], cwd=path)

    def checkout_new_branch(self, path: str, branch: str, start_point: str = "FETCH_HEAD") -> GitResult:
        return self.run(["checkout", "-b", branch, start_point], cwd=path)

    def reset_hard(self, path: str, ref: str = "FETCH_HEAD") -> GitResult:
        return self.run(["reset", "--hard", ref], cwd=path)

    def ls_tree(self, path: str, subpath: Optional[str] = None, ref: str = "HEAD") -> List[str]:
        """
        List tracked files at a ref from git's object database.

        Works without any file content being present locally.

        Returns:
            Repository-relative file paths
        """
        args = ["ls-tree", "-r", "-z", "--name-only", ref]
        if subpath:
            args += ["--", subpath]

        result = self.run(args, cwd=path)
        return [entry for entry in result.stdout.split("\0") if entry.strip()]

    def sparse_checkout_add(self, path: str, files: Iterable[str]) -> GitResult:
        """
        Add files to the sparse-checkout list. In a partial clone this also
        fetches their blobs, in one batch, and writes them to the worktree.
        """
        patterns = "\n".join(escape_sparse_pattern(f) for f in files) + "\n"
        return self.run(["sparse-checkout", "add", "--stdin"], cwd=path, input_text=patterns)
