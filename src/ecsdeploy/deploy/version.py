"""Version identifier resolution from git state."""

from __future__ import annotations

import subprocess  # nosec B404
from pathlib import Path

from ecsdeploy.config.defaults import VERSION_LENGTH
from ecsdeploy.lib.errors import NotAVersionControlledTreeError
from ecsdeploy.lib.logging_config import get_logger

logger = get_logger(__name__)


class VersionResolver:
    """Derive the immutable version identifier for a build.

    The identifier is the abbreviated SHA of ``HEAD``; the same revision
    always yields the same identifier.

    Example:
        >>> VersionResolver(".").resolve()  # doctest: +SKIP
        'abc1234'
    """

    def __init__(self, work_dir: str | Path = ".", length: int = VERSION_LENGTH) -> None:
        self.work_dir = Path(work_dir)
        self.length = length

    def resolve(self) -> str:
        """Return the version identifier of the checked-out revision.

        Returns:
            Abbreviated git SHA of HEAD

        Raises:
            NotAVersionControlledTreeError: If the directory is not inside a git
                checkout, HEAD has no commit, or git is not installed
        """
        self._git("rev-parse", "--git-dir")
        sha = self._git("rev-parse", f"--short={self.length}", "HEAD")
        logger.debug(f"Resolved version {sha} in {self.work_dir}")
        return sha

    def _git(self, *args: str) -> str:
        try:
            result = subprocess.run(  # noqa: S603  # nosec B603 B607
                ["git", *args],  # noqa: S607
                cwd=self.work_dir,
                capture_output=True,
                text=True,
            )
        except (FileNotFoundError, NotADirectoryError) as exc:
            raise NotAVersionControlledTreeError(
                str(self.work_dir), detail=str(exc)
            ) from exc

        if result.returncode != 0:
            raise NotAVersionControlledTreeError(
                str(self.work_dir), detail=(result.stderr or "").strip() or None
            )
        return result.stdout.strip()
