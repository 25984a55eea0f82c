"""Resolve the account name that owns a process."""

import logging
from pathlib import Path

import psutil

logger = logging.getLogger(__name__)

DEFAULT_PROC_ROOT = Path("/proc")


def parse_real_uid(status_text: str) -> int | None:
    """Extract the real uid from the text of a /proc/<pid>/status file."""
    for line in status_text.splitlines():
        if line.startswith("Uid:"):
            fields = line.split()
            if len(fields) < 2:
                return None
            try:
                return int(fields[1])
            except ValueError:
                return None
    return None


class OwnerResolver:
    """
    Looks up process owners by uid.

    Reads /proc/<pid>/status where a proc filesystem exists and maps the real
    uid through the password database. Elsewhere asks psutil directly.
    """

    def __init__(self, proc_root: Path | str = DEFAULT_PROC_ROOT) -> None:
        self._proc_root = Path(proc_root)

    @property
    def uses_procfs(self) -> bool:
        """Whether owner lookups read the proc filesystem."""
        return self._proc_root.is_dir()

    def resolve(self, pid: int) -> str | None:
        """Return the owner's account name, or None if it cannot be determined."""
        if self.uses_procfs:
            return self._resolve_procfs(pid)
        return self._resolve_psutil(pid)

    def _resolve_procfs(self, pid: int) -> str | None:
        status_path = self._proc_root / str(pid) / "status"
        try:
            status_text = status_path.read_text(errors="replace")
        except OSError as exc:
            logger.debug("Cannot read %s: %s", status_path, exc)
            return None

        uid = parse_real_uid(status_text)
        if uid is None:
            logger.debug("No Uid line in %s", status_path)
            return None
        return self.uid_to_name(uid)

    @staticmethod
    def uid_to_name(uid: int) -> str | None:
        """Map a numeric uid to an account name."""
        import pwd

        try:
            return pwd.getpwuid(uid).pw_name
        except KeyError:
            logger.debug("Uid %d has no account", uid)
            return None

    @staticmethod
    def _resolve_psutil(pid: int) -> str | None:
        try:
            return psutil.Process(pid).username() or None
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess) as exc:
            logger.debug("Cannot resolve owner of pid %d: %s", pid, exc)
            return None
