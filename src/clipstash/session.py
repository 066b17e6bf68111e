import logging
import re
import subprocess
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

PROC_STAT_PATH = Path("/proc/stat")

_SYSCTL_SEC_RE = re.compile(r"sec\s*=\s*(\d+)")


def _darwin_boot_time() -> int | None:
    # Output looks like: { sec = 1691234567, usec = 123456 } Sat Aug  5 ...
    try:
        result = subprocess.run(
            ["sysctl", "-n", "kern.boottime"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError):
        logger.exception("Failed to run sysctl")
        return None
    if result.returncode != 0:
        return None
    match = _SYSCTL_SEC_RE.search(result.stdout)
    return int(match.group(1)) if match else None


def _linux_boot_time(stat_path: Path = PROC_STAT_PATH) -> int | None:
    try:
        lines = stat_path.read_text().splitlines()
    except OSError:
        return None
    for line in lines:
        if line.startswith("btime "):
            try:
                return int(line.split()[1])
            except (IndexError, ValueError):
                return None
    return None


def fetch_boot_time() -> int | None:
    """Return system boot time in seconds since the epoch, if it can be read."""
    if sys.platform == "darwin":
        return _darwin_boot_time()
    return _linux_boot_time()


def current_session_id() -> int:
    """Identifier for the current machine session; changes on every reboot.

    Falls back to 0 when the boot time is unavailable, so ephemeral history
    still survives app restarts on such systems.
    """
    boot_time = fetch_boot_time()
    if boot_time is None:
        logger.warning("Could not determine boot time, using fallback session id")
        return 0
    return boot_time
