import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass

from .config import Config
from .constants import APP_NAME
from .git_wrapper import GitError, GitRepo

logger = logging.getLogger(APP_NAME)


def _exited_non_zero(error: Exception) -> bool:
    """True if git ran and reported failure, as opposed to never starting."""
    return isinstance(error, GitError) and error.returncode is not None


class StepStatus(enum.Enum):
    """Outcome of a single sync step."""

    OK = "ok"
    TOLERATED = "tolerated"
    FATAL = "fatal"


@dataclass
class StepResult:
    """Records how a sync step ended.

    Attributes:
        step (str): The step name (e.g. 'commit', 'push-tags:origin').
        status (StepStatus): How the step ended.
        error (Exception | None): The failure, if any.
    """

    step: str
    status: StepStatus
    error: Exception | None = None


class Kicker:
    """Runs the stage/commit/pull/push/tag sequence for one repository.

    Every step is recorded in `results`, including the one that aborted the
    run, so callers can tell which step failed after catching the error.

    Attributes:
        config (Config): The sync behaviour.
        repo (GitRepo): The repository to operate on.
        results (list[StepResult]): Executed steps, in order.
    """

    def __init__(self, config: Config, repo: GitRepo):
        self.config = config
        self.repo = repo
        self.results: list[StepResult] = []

    @property
    def failed_step(self) -> str | None:
        """The name of the step that aborted the run, if any."""
        for result in self.results:
            if result.status is StepStatus.FATAL:
                return result.step
        return None

    def _step(
        self, name: str, action: Callable[[], object], tolerate: bool = False
    ) -> StepResult:
        """Executes one step and records its outcome.

        Args:
            name (str): The step name.
            action (Callable[[], object]): The operation to run.
            tolerate (bool, optional): Record a non-zero git exit as TOLERATED
                                       instead of re-raising it. Launch failures
                                       and other errors stay fatal. Defaults to False.

        Returns:
            StepResult: The recorded outcome.

        Raises:
            Exception: The original error, unchanged, unless it was tolerated.
        """
        logger.debug(f"step: {name}")
        try:
            action()
        except Exception as e:
            if not (tolerate and _exited_non_zero(e)):
                self.results.append(StepResult(name, StepStatus.FATAL, e))
                raise
            logger.debug(f"{name}: {e}")
            result = StepResult(name, StepStatus.TOLERATED, e)
        else:
            result = StepResult(name, StepStatus.OK)
        self.results.append(result)
        return result

    def push_tags(self) -> None:
        """Pushes tags to each discovered remote, or once to the default remote.

        With `push_all`, remotes are visited in discovery order and the first
        failure stops the loop.
        """
        if not self.config.push_all:
            self._step("push-tags", self.repo.push_tags)
            return

        for remote in self.config.remotes:
            self._step(
                f"push-tags:{remote}", lambda remote=remote: self.repo.push_tags(remote)
            )

    def run(self) -> list[StepResult]:
        """Runs the full sync sequence.

        1. Query remotes.
        2. Refresh the nonce marker (if enabled).
        3. Stage all file changes.
        4. Commit (failure is tolerated: usually "nothing to commit").
        5. Pull remote changes.
        6. Push local changes.
        7. Fetch and push tags (if enabled).

        Returns:
            list[StepResult]: The recorded outcome of every step.

        Raises:
            GitError: If any git step other than commit fails.
            OSError: If the nonce marker cannot be written.
        """
        config = self.config
        repo = self.repo
        logger.debug(f"config: {config}")

        self._step("query-remotes", lambda: config.query_remotes(repo))

        if config.nonce:
            self._step("nonce", lambda: config.ensure_nonce(repo.path))

        self._step("stage", repo.add_all)
        self._step("commit", lambda: repo.commit(config.commit_message), tolerate=True)
        self._step("pull", lambda: repo.pull(config.pull_all))
        self._step("push", lambda: repo.push(config.push_all))

        if config.sync_tags:
            self._step("fetch-tags", lambda: repo.fetch_tags(config.fetch_all))
            self.push_tags()

        return self.results


def kick(config: Config, repo: GitRepo | None = None) -> list[StepResult]:
    """Stages, commits, pulls, pushes and syncs tags for a repository.

    Args:
        config (Config): The sync behaviour.
        repo (GitRepo | None, optional): The repository. Defaults to the current
                                         directory.

    Returns:
        list[StepResult]: The recorded outcome of every step.
    """
    if repo is None:
        repo = GitRepo(debug=config.debug)
    return Kicker(config, repo).run()
