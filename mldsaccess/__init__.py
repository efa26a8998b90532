"""mlds-access - Set up SSH access to the MLDS research cluster."""

import subprocess
from pathlib import Path

BASE_VERSION = "0.1.0"


def _get_version() -> str:
    """
    Get version string.

    Returns:
        - "dev" if running from a git checkout
        - "0.1.0+git.<commit>" if installed (commit hash embedded at build time)
        - "0.1.0" fallback if the commit cannot be determined
    """
    try:
        repo_root = Path(__file__).parent.parent
        if (repo_root / ".git").exists():
            return "dev"
    except OSError:
        pass

    # Installed mode - embedded by hatch_build.py
    try:
        version_file = Path(__file__).parent / "_version.txt"
        if version_file.exists():
            commit = version_file.read_text().strip()
            if commit:
                return f"{BASE_VERSION}+git.{commit}"
    except OSError:
        pass

    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short=7", "HEAD"],
            capture_output=True,
            text=True,
            timeout=1,
            cwd=Path(__file__).parent,
        )
        if result.returncode == 0:
            commit = result.stdout.strip()
            if commit:
                return f"{BASE_VERSION}+git.{commit}"
    except (subprocess.SubprocessError, OSError):
        pass

    return BASE_VERSION


__version__ = _get_version()
