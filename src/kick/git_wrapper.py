import logging
import shlex
import subprocess
from pathlib import Path

from .constants import APP_NAME

logger = logging.getLogger(APP_NAME)


class GitError(RuntimeError):
    """Raised when a git invocation cannot be launched or exits non-zero.

    Attributes:
        git_args (list[str]): The arguments passed to git (without the `git` prefix).
        returncode (int | None): The exit status, or None if git never started.
    """

    def __init__(self, message: str, args: list[str], returncode: int | None):
        super().__init__(message)
        self.git_args = args
        self.returncode = returncode


class GitRepo:
    """A wrapper around the Git command-line interface for the sync steps.

    Mutating commands inherit the caller's stdin so that git can prompt
    for credentials; `git remote` gets none. Output is streamed to the
    terminal in debug mode and discarded otherwise.

    Attributes:
        path (Path): The directory git runs in.
        debug (bool): Whether to stream git output and log each command.
    """

    def __init__(self, path: Path | None = None, debug: bool = False):
        """Initializes the GitRepo instance.

        Args:
            path (Path | None, optional): The working directory for git.
                                          Defaults to the current directory.
            debug (bool, optional): Stream git output. Defaults to False.
        """
        self.path = path if path is not None else Path.cwd()
        self.debug = debug

    def _run(self, args: list[str], capture: bool = False) -> str:
        """Executes a Git command within the repository context.

        Args:
            args (list[str]): A list of arguments to pass to the git command.
            capture (bool, optional):   Whether to capture and return stdout.
                                        Stderr is still inherited and stdin is
                                        closed. Defaults to False.

        Returns:
            str:    The raw stdout of the command if capture is True,
                    otherwise an empty string.

        Raises:
            GitError: If git cannot be launched or returns a non-zero exit code.
        """
        cmd = ["git", *args]
        logger.debug(f"cmd: {shlex.join(cmd)}")

        stdin = None
        if capture:
            stdin = subprocess.DEVNULL
            stdout = subprocess.PIPE
            stderr = None
        elif self.debug:
            stdout = stderr = None
        else:
            stdout = stderr = subprocess.DEVNULL

        try:
            res = subprocess.run(
                cmd,
                cwd=self.path,
                stdin=stdin,
                stdout=stdout,
                stderr=stderr,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"git {' '.join(args)} exited with status {e.returncode}",
                args,
                e.returncode,
            ) from e
        except OSError as e:
            raise GitError(f"Unable to launch git: {e}", args, None) from e

        return res.stdout if capture else ""

    def remote_names(self) -> list[str]:
        """Lists the configured remote names, in the order git reports them.

        Returns:
            list[str]: One entry per line of `git remote` output.
        """
        return self._run(["remote"], capture=True).splitlines()

    def add_all(self) -> None:
        """
        Stages all changes (modified, deleted, and untracked files)
        in the working directory.
        """
        self._run(["add", "."])

    def commit(self, message: str = "") -> None:
        """Commits all tracked changes.

        Args:
            message (str, optional): The commit message. When empty, git is left
                                     to open the configured editor.
        """
        cmd = ["commit", "-a"]
        if message:
            cmd.extend(["-m", message])
        self._run(cmd)

    def pull(self, all_remotes: bool = False) -> None:
        cmd = ["pull"]
        if all_remotes:
            cmd.append("--all")
        self._run(cmd)

    def push(self, all_remotes: bool = False) -> None:
        cmd = ["push"]
        if all_remotes:
            cmd.append("--all")
        self._run(cmd)

    def fetch_tags(self, all_remotes: bool = False) -> None:
        """Fetches tags from the default remote, or from every remote."""
        cmd = ["fetch", "--tags"]
        if all_remotes:
            cmd.append("--all")
        self._run(cmd)

    def push_tags(self, remote: str | None = None) -> None:
        """Pushes local tags.

        Args:
            remote (str | None, optional): An explicit remote name. When None,
                                           git pushes to the default remote.
        """
        cmd = ["push"]
        if remote is not None:
            cmd.append(remote)
        cmd.append("--tags")
        self._run(cmd)
