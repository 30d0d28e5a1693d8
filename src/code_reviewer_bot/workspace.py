"""
Repository Workspace

Local git checkouts of pull request repositories, cloned on demand and
deleted once a review run is finished.
"""

import os
import shutil
import logging
import threading
import subprocess
from typing import Dict, List, Optional, Tuple


logger = logging.getLogger(__name__)


class WorkspaceError(Exception):
    """Repository acquisition failed"""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


class GitWorkspaceProvider:
    """
    Clones repositories into `<root_dir>/<owner>_<repo>`.

    An existing directory is reused as-is without fetching. Each
    repository has its own lock, taken by `acquire` and returned by
    `release`, so concurrent runs against the same repository wait for
    each other instead of racing on clone and delete.
    """

    def __init__(self, root_dir: str = "./repos", git_binary: str = "git"):
        """
        Initialize workspace provider.

        Args:
            root_dir: Directory holding every checkout
            git_binary: Git executable name or path
        """
        self.root_dir = root_dir
        self.git_binary = git_binary

        self._registry_lock = threading.Lock()
        self._repo_locks: Dict[Tuple[str, str], threading.Lock] = {}
        self._held: Dict[str, threading.Lock] = {}

    def workspace_path(self, owner: str, repo: str) -> str:
        return os.path.join(self.root_dir, f"{owner}_{repo}")

    def acquire(self, base_url: str, token: Optional[str], owner: str, repo: str) -> str:
        """
        Return a local checkout of the repository, cloning it if absent.

        Blocks while another run holds the same repository.

        Args:
            base_url: VCS host, e.g. "github.com"
            token: Access token used in the clone URL
            owner: Repository owner
            repo: Repository name

        Returns:
            Local path of the checkout

        Raises:
            WorkspaceError: If the clone fails
        """
        lock = self._lock_for(owner, repo)
        lock.acquire()

        path = self.workspace_path(owner, repo)
        try:
            if os.path.isdir(path):
                logger.info(f"Reusing existing workspace {path}")
            else:
                self._clone(base_url, token, owner, repo, path)
        except Exception:
            lock.release()
            raise

        with self._registry_lock:
            self._held[path] = lock
        return path

    def release(self, path: str) -> None:
        """Delete a checkout and hand the repository to the next waiting run."""
        try:
            shutil.rmtree(path)
            logger.info(f"Removed workspace {path}")
        except FileNotFoundError:
            logger.debug(f"Workspace {path} already removed")
        except OSError as e:
            logger.warning(f"Failed to remove workspace {path}: {e}")
        finally:
            with self._registry_lock:
                lock = self._held.pop(path, None)
            if lock is not None:
                lock.release()

    def _lock_for(self, owner: str, repo: str) -> threading.Lock:
        with self._registry_lock:
            return self._repo_locks.setdefault((owner, repo), threading.Lock())

    def _clone(self, base_url: str, token: Optional[str], owner: str, repo: str, path: str) -> None:
        host = base_url.split('://', 1)[-1].rstrip('/')
        if token:
            clone_url = f"https://x-access-token:{token}@{host}/{owner}/{repo}.git"
        else:
            clone_url = f"https://{host}/{owner}/{repo}.git"

        logger.info(f"Cloning {host}/{owner}/{repo} into {path}")
        os.makedirs(self.root_dir, exist_ok=True)

        command: List[str] = [self.git_binary, "clone", clone_url, path]
        try:
            subprocess.run(
                command,
                capture_output=True,
                text=True,
                check=True,
                encoding='utf-8',
                errors='ignore',
            )
        except FileNotFoundError as e:
            raise WorkspaceError(f"git executable not found: {self.git_binary}") from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or '').strip()
            if token:
                stderr = stderr.replace(token, '***')
            raise WorkspaceError(
                f"git clone of {owner}/{repo} failed: {stderr}",
                returncode=e.returncode,
            ) from e
