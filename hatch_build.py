"""Hatchling build hook to embed the git commit in mldsaccess at build time."""

import subprocess
from pathlib import Path

from hatchling.builders.hooks.plugin.interface import BuildHookInterface


class CustomBuildHook(BuildHookInterface):
    """Build hook to capture git commit hash."""

    def initialize(self, version, build_data):
        """Run before the build starts."""
        try:
            result = subprocess.run(
                ["git", "rev-parse", "--short=7", "HEAD"],
                capture_output=True,
                text=True,
                timeout=5,
                check=False,
            )
        except (subprocess.SubprocessError, OSError) as e:
            print(f"Warning: Could not capture git commit: {e}")
            return

        commit = result.stdout.strip() if result.returncode == 0 else ""
        if commit:
            # Read by mldsaccess._get_version() in installed mode
            version_file = Path(self.root) / "mldsaccess" / "_version.txt"
            version_file.write_text(commit)
            print(f"Embedded git commit: {commit}")
