"""Remote operations on cluster hosts via OpenSSH."""

import re
import shlex
import shutil
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

# Creates, lists and removes a file in the remote home directory
CONNECTIVITY_TEST_ARGV = [
    "sh",
    "-c",
    "touch ~/golden-ticket && ls -la ~/golden-ticket && rm ~/golden-ticket",
]

# Used when ssh-copy-id is not available (Windows)
AUTHORIZED_KEYS_APPEND_ARGV = [
    "sh",
    "-c",
    "umask 077 && mkdir -p ~/.ssh && cat >> ~/.ssh/authorized_keys",
]

# Seconds to wait for a non-interactive remote command
REMOTE_COMMAND_TIMEOUT = 60

HOST_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
USER_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9._-]*$")


class RemoteError(Exception):
    """Raised when a remote request cannot be built from the given values."""

    pass


class RemoteTarget(BaseModel):
    """Where and as whom to run a remote command."""

    host: str = Field(..., description="Host name or SSH config alias")
    user: str = Field(..., description="Remote account name")
    identity_file: str | None = Field(default=None, description="Private key to present")
    connect_timeout: int = Field(default=10, ge=1)
    ssh_config_file: str | None = Field(
        default=None, description="SSH config to read instead of the default one"
    )

    @field_validator("host")
    @classmethod
    def valid_host(cls, v: str) -> str:
        """Validate host cannot be mistaken for an option."""
        if not HOST_PATTERN.match(v):
            raise ValueError(f"Invalid host: {v!r}")
        return v

    @field_validator("user")
    @classmethod
    def valid_user(cls, v: str) -> str:
        """Validate user name is safe to hand to ssh."""
        if not USER_PATTERN.match(v):
            raise ValueError(f"Invalid user name: {v!r}")
        return v


class RemoteCommand(BaseModel):
    """A command to run on a target, given as an argument vector."""

    target: RemoteTarget
    argv: list[str] = Field(default_factory=list)
    stdin: str | None = None
    batch: bool = Field(default=True, description="Never prompt for passwords")


@dataclass
class FallbackResult:
    """Outcome of an operation tried against a primary and an alternate target."""

    succeeded: bool
    target: RemoteTarget
    used_fallback: bool


def make_target(
    host: str,
    user: str,
    identity_file: str | Path | None = None,
    connect_timeout: int = 10,
    ssh_config_file: str | None = None,
) -> RemoteTarget:
    """
    Build a validated RemoteTarget.

    Raises:
        RemoteError: If host or user cannot be used safely
    """
    try:
        return RemoteTarget(
            host=host,
            user=user,
            identity_file=str(identity_file) if identity_file is not None else None,
            connect_timeout=connect_timeout,
            ssh_config_file=ssh_config_file,
        )
    except ValidationError as e:
        messages = "; ".join(error["msg"] for error in e.errors())
        raise RemoteError(messages) from e


def build_ssh_args(command: RemoteCommand) -> list[str]:
    """
    Build the ssh argument list for a command.

    The remote command is quoted into a single string, so values from the
    argument vector are never interpreted by the remote shell.
    """
    target = command.target
    args = ["ssh"]

    if target.ssh_config_file:
        args += ["-F", target.ssh_config_file]

    args += ["-o", f"ConnectTimeout={target.connect_timeout}"]

    if command.batch:
        args += ["-o", "BatchMode=yes"]

    if target.identity_file:
        args += ["-o", "IdentitiesOnly=yes", "-i", target.identity_file]

    args += ["-l", target.user, "--", target.host]

    if command.argv:
        args.append(shlex.join(command.argv))

    return args


def run_remote(command: RemoteCommand, quiet: bool = False, timeout: float | None = None) -> bool:
    """
    Run a remote command.

    Args:
        command: Command request
        quiet: Discard the command's output
        timeout: Seconds before giving up (None waits forever)

    Returns:
        True if ssh exited with status 0
    """
    output = subprocess.DEVNULL if quiet else None

    try:
        result = subprocess.run(
            build_ssh_args(command),
            input=command.stdin,
            text=True,
            stdout=output,
            stderr=output,
            timeout=timeout,
        )
    except (subprocess.TimeoutExpired, OSError):
        return False

    return result.returncode == 0


def install_public_key(target: RemoteTarget, public_key_path: Path) -> bool:
    """
    Append a public key to the target account's authorized_keys.

    Uses ssh-copy-id where available. Otherwise the key is piped over ssh.
    Both may prompt for the account password.

    Returns:
        True if the key was installed
    """
    if shutil.which("ssh-copy-id"):
        args = [
            "ssh-copy-id",
            "-i",
            str(public_key_path),
            "-o",
            f"ConnectTimeout={target.connect_timeout}",
            "-o",
            f"User={target.user}",
            target.host,
        ]
        try:
            result = subprocess.run(args)
        except OSError:
            return False
        return result.returncode == 0

    try:
        public_key = public_key_path.read_text().strip() + "\n"
    except OSError:
        return False

    command = RemoteCommand(
        target=target,
        argv=AUTHORIZED_KEYS_APPEND_ARGV,
        stdin=public_key,
        batch=False,
    )
    return run_remote(command)


def check_connectivity(target: RemoteTarget) -> bool:
    """Open a key-authenticated session and run a harmless command."""
    command = RemoteCommand(target=target, argv=CONNECTIVITY_TEST_ARGV)
    return run_remote(command, timeout=REMOTE_COMMAND_TIMEOUT)


def append_remote_log(target: RemoteTarget, log_path: str, line: str) -> bool:
    """
    Append one line to a file on the target. Best effort.

    The line travels on stdin and the path as a positional argument, so
    neither is parsed by the remote shell.

    Returns:
        True if the line was written
    """
    command = RemoteCommand(
        target=target,
        argv=["sh", "-c", 'cat >> "$1"', "sh", log_path],
        stdin=line.rstrip("\n") + "\n",
    )
    return run_remote(command, quiet=True, timeout=REMOTE_COMMAND_TIMEOUT)


def with_fallback(
    operation: Callable[[RemoteTarget], bool],
    primary: RemoteTarget,
    fallback: RemoteTarget | None,
    on_fallback: Callable[[RemoteTarget, RemoteTarget], None] | None = None,
) -> FallbackResult:
    """
    Run an operation against the primary target, then once against the fallback.

    Args:
        operation: Callable returning True on success
        primary: First target to try
        fallback: Alternate target (skipped if None or same as primary)
        on_fallback: Called with (primary, fallback) before the retry

    Returns:
        FallbackResult naming the target of the last attempt
    """
    if operation(primary):
        return FallbackResult(succeeded=True, target=primary, used_fallback=False)

    if fallback is None or fallback == primary:
        return FallbackResult(succeeded=False, target=primary, used_fallback=False)

    if on_fallback is not None:
        on_fallback(primary, fallback)

    return FallbackResult(succeeded=operation(fallback), target=fallback, used_fallback=True)
