"""SSH config file management."""

import os
import shutil
import tempfile
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from mldsaccess.remote import HOST_PATTERN

HOST_KEYWORD = "Host"

# Keywords that open a new block in ssh_config(5)
DECLARATION_KEYWORDS = (HOST_KEYWORD, "Match")

OPTION_INDENT = "    "

BACKUP_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

NICKNAME_RULES = "letters, digits, '.', '_' or '-', starting with a letter or digit"


class SSHConfigError(Exception):
    """Raised when the SSH config file cannot be read or written."""

    pass


class UpdatePolicy(str, Enum):
    """What to do when a host block for the nickname already exists."""

    SKIP = "skip"
    REPLACE = "replace"


class UpsertResult(str, Enum):
    """Outcome of an upsert."""

    ADDED = "added"
    REPLACED = "replaced"
    SKIPPED = "skipped"


def is_valid_nickname(nickname: str) -> bool:
    """Check a nickname can be written as a Host alias and passed to ssh as a host."""
    return bool(HOST_PATTERN.fullmatch(nickname))


class HostBlock(BaseModel):
    """A single ``Host`` entry as written by mlds-access."""

    nickname: str = Field(..., min_length=1, description="Host alias (e.g. 'wolf')")
    hostname: str = Field(..., min_length=1, description="Address to connect to")
    user: str = Field(..., min_length=1, description="Remote account name")
    identity_file: str = Field(..., min_length=1, description="Private key path")
    extra_options: list[str] = Field(
        default_factory=list, description="Additional option lines, written verbatim"
    )

    @field_validator("nickname")
    @classmethod
    def valid_nickname(cls, v: str) -> str:
        """Validate the nickname is usable as an ssh host argument."""
        v = v.strip()
        if not is_valid_nickname(v):
            raise ValueError(f"nickname must use {NICKNAME_RULES}")
        return v

    @field_validator("hostname", "user")
    @classmethod
    def single_token(cls, v: str) -> str:
        """Validate the value is one whitespace-free token."""
        v = v.strip()
        if not v or any(c.isspace() for c in v):
            raise ValueError("must be a single token without whitespace")
        return v

    @field_validator("identity_file")
    @classmethod
    def single_line(cls, v: str) -> str:
        """Validate the identity file path fits on one line."""
        v = v.strip()
        if not v or "\n" in v or "\r" in v:
            raise ValueError("identity file must be a non-empty single-line path")
        return v

    @field_validator("extra_options")
    @classmethod
    def options_single_line(cls, v: list[str]) -> list[str]:
        """Validate extra options are single, non-empty lines."""
        cleaned = []
        for option in v:
            option = option.strip()
            if not option or "\n" in option or "\r" in option:
                raise ValueError("extra options must be non-empty single lines")
            cleaned.append(option)
        return cleaned

    def to_lines(self) -> list[str]:
        """Return the block as config lines (declaration first, options indented)."""
        identity = self.identity_file
        if any(c.isspace() for c in identity):
            identity = f'"{identity}"'

        lines = [
            f"{HOST_KEYWORD} {self.nickname}",
            f"{OPTION_INDENT}HostName {self.hostname}",
            f"{OPTION_INDENT}User {self.user}",
            f"{OPTION_INDENT}IdentityFile {identity}",
        ]
        lines.extend(f"{OPTION_INDENT}{option}" for option in self.extra_options)
        return lines


@dataclass
class SSHConfigDocument:
    """
    An SSH config file held in memory as lines.

    Each line keeps its own terminator, so files mixing CRLF and LF render
    back unchanged. ``newline`` is the dominant terminator of the file and
    is used for lines added to it.
    """

    lines: list[str] = field(default_factory=list)
    newline: str = "\n"


@dataclass(frozen=True)
class BlockRange:
    """
    Location of a host block inside a document.

    ``start``/``end`` delimit the deletable span (end exclusive), which
    includes blank lines around the block. ``declaration`` is the index of
    the ``Host`` line itself.
    """

    start: int
    end: int
    declaration: int


@dataclass
class PersistResult:
    """Result of writing the SSH config to disk."""

    path: Path
    backup_path: Path | None = None
    backup_error: str | None = None


def _is_blank(line: str) -> bool:
    return not line.strip()


def _is_declaration(line: str) -> bool:
    tokens = line.split()
    return bool(tokens) and tokens[0] in DECLARATION_KEYWORDS


def _declares_nickname(line: str, nickname: str) -> bool:
    tokens = line.split()
    return len(tokens) >= 2 and tokens[0] == HOST_KEYWORD and tokens[1:] == [nickname]


def _terminate(line: str, newline: str) -> str:
    return line if line.endswith(("\n", "\r")) else line + newline


def parse(content: str) -> SSHConfigDocument:
    """Split config text into a document, keeping every line terminator."""
    crlf = content.count("\r\n")
    newline = "\r\n" if crlf > content.count("\n") - crlf else "\n"
    return SSHConfigDocument(lines=content.splitlines(keepends=True), newline=newline)


def load(config_path: str | Path) -> SSHConfigDocument:
    """
    Read an SSH config file.

    Args:
        config_path: Path to SSH config file (e.g., ~/.ssh/config)

    Returns:
        Parsed document; empty if the file does not exist yet

    Raises:
        SSHConfigError: If the file exists but cannot be read
    """
    config_file = Path(config_path).expanduser()

    try:
        with open(config_file, encoding="utf-8", newline="") as f:
            content = f.read()
    except FileNotFoundError:
        return SSHConfigDocument()
    except (OSError, UnicodeDecodeError) as e:
        raise SSHConfigError(f"Cannot read SSH config {config_file}: {e}") from e

    return parse(content)


def find_block(document: SSHConfigDocument, nickname: str) -> BlockRange | None:
    """
    Find the first host block declared as ``Host <nickname>``.

    The block runs until the next ``Host``/``Match`` line or end of file.
    Unindented comments directly above the next declaration are left to
    that declaration. Blank lines touching the block are part of its span.

    Args:
        document: Parsed SSH config
        nickname: Host alias to look up (case-sensitive)

    Returns:
        BlockRange if found, None otherwise
    """
    lines = document.lines

    declaration = None
    for index, line in enumerate(lines):
        if _declares_nickname(line, nickname):
            declaration = index
            break

    if declaration is None:
        return None

    end = declaration + 1
    while end < len(lines) and not _is_declaration(lines[end]):
        end += 1

    body_end = end
    while body_end > declaration + 1 and (
        _is_blank(lines[body_end - 1]) or lines[body_end - 1].startswith("#")
    ):
        body_end -= 1

    span_end = body_end
    while span_end < end and _is_blank(lines[span_end]):
        span_end += 1

    span_start = declaration
    while span_start > 0 and _is_blank(lines[span_start - 1]):
        span_start -= 1

    return BlockRange(start=span_start, end=span_end, declaration=declaration)


def _remove_range(document: SSHConfigDocument, block_range: BlockRange) -> None:
    before = document.lines[: block_range.start]
    after = document.lines[block_range.end :]
    # Keep one separator between the neighbours of the removed block
    separator = [document.newline] if before and after else []
    document.lines = before + separator + after


def _append_block(document: SSHConfigDocument, block: HostBlock) -> None:
    lines = document.lines
    while lines and _is_blank(lines[-1]):
        lines.pop()
    if lines:
        lines[-1] = _terminate(lines[-1], document.newline)
        lines.append(document.newline)
    lines.extend(line + document.newline for line in block.to_lines())


def upsert(
    document: SSHConfigDocument,
    block: HostBlock,
    policy: UpdatePolicy = UpdatePolicy.REPLACE,
) -> UpsertResult:
    """
    Insert or update the host block for ``block.nickname`` in place.

    New and replaced blocks are always written at the end of the document,
    so an update moves the entry after every other host.

    Args:
        document: Parsed SSH config (mutated)
        block: Desired host block
        policy: What to do if the nickname already has a block

    Returns:
        ADDED, REPLACED or SKIPPED
    """
    existing = find_block(document, block.nickname)

    if existing is not None:
        if policy == UpdatePolicy.SKIP:
            return UpsertResult.SKIPPED
        _remove_range(document, existing)
        result = UpsertResult.REPLACED
    else:
        result = UpsertResult.ADDED

    _append_block(document, block)
    return result


def render(document: SSHConfigDocument) -> str:
    """Serialize a document back to text, ending with a newline."""
    if not document.lines:
        return ""
    last = _terminate(document.lines[-1], document.newline)
    return "".join(document.lines[:-1]) + last


def backup_config(config_file: Path) -> Path | None:
    """
    Create a timestamped copy of the SSH config file.

    Args:
        config_file: Path to the SSH config file

    Returns:
        Path of the backup, or None if there was nothing to back up
    """
    if not config_file.exists():
        return None

    stamp = time.strftime(BACKUP_TIMESTAMP_FORMAT)
    backup_file = config_file.parent / f"{config_file.name}.backup.{stamp}"
    counter = 1
    while backup_file.exists():
        backup_file = config_file.parent / f"{config_file.name}.backup.{stamp}.{counter}"
        counter += 1

    # copy2 keeps the permission bits of the original
    shutil.copy2(config_file, backup_file)

    return backup_file


def persist(config_path: str | Path, text: str) -> PersistResult:
    """
    Back up the current config and atomically replace it with ``text``.

    The new file is written next to the target and renamed over it, then
    left readable and writable by the owner only. A failed backup is
    reported in the result instead of aborting the write.

    Args:
        config_path: Path to SSH config file
        text: Full new file content

    Returns:
        PersistResult with the backup path or the backup error

    Raises:
        SSHConfigError: If the directory or file cannot be written
    """
    config_file = Path(config_path).expanduser()
    # Write through symlinked configs instead of replacing the link
    target = config_file.resolve() if config_file.is_symlink() else config_file

    try:
        target.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
    except OSError as e:
        raise SSHConfigError(f"Cannot create SSH directory {target.parent}: {e}") from e

    result = PersistResult(path=config_file)

    try:
        result.backup_path = backup_config(target)
    except OSError as e:
        result.backup_error = str(e)

    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
        )
    except OSError as e:
        raise SSHConfigError(f"Cannot write SSH config {config_file}: {e}") from e

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        tmp_path.chmod(0o600)
        os.replace(tmp_path, target)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise SSHConfigError(f"Cannot write SSH config {config_file}: {e}") from e

    return result


def add_ssh_host(
    config_path: str | Path,
    block: HostBlock,
    policy: UpdatePolicy = UpdatePolicy.REPLACE,
) -> tuple[UpsertResult, PersistResult | None]:
    """
    Add or update an SSH host entry in the SSH config file.

    Args:
        config_path: Path to SSH config file (e.g., ~/.ssh/config)
        block: Host block to write
        policy: What to do if the nickname already exists

    Returns:
        Tuple of (upsert outcome, persist result). The persist result is
        None when the entry was skipped and nothing was written.

    Raises:
        SSHConfigError: If the config cannot be read or written
    """
    document = load(config_path)
    result = upsert(document, block, policy)

    if result == UpsertResult.SKIPPED:
        return result, None

    return result, persist(config_path, render(document))


def host_exists(config_path: str | Path, nickname: str) -> bool:
    """
    Check if an SSH host entry exists in the SSH config file.

    Args:
        config_path: Path to SSH config file
        nickname: Host alias to check

    Returns:
        True if host exists, False otherwise
    """
    return find_block(load(config_path), nickname) is not None


def get_ssh_host(config_path: str | Path, nickname: str) -> str | None:
    """
    Get the HostName configured for an SSH host entry.

    Args:
        config_path: Path to SSH config file
        nickname: Host alias to look up

    Returns:
        HostName value if the entry has one, None otherwise
    """
    document = load(config_path)
    block_range = find_block(document, nickname)
    if block_range is None:
        return None

    for line in document.lines[block_range.declaration + 1 : block_range.end]:
        tokens = line.split(None, 1)
        if len(tokens) == 2 and tokens[0].lower() == "hostname":
            return tokens[1].strip()

    return None


def remove_ssh_host(config_path: str | Path, nickname: str) -> PersistResult | None:
    """
    Remove an SSH host entry from the SSH config file.

    Args:
        config_path: Path to SSH config file
        nickname: Host alias to remove

    Returns:
        PersistResult if the host was found and removed, None otherwise

    Raises:
        SSHConfigError: If the config cannot be read or written
    """
    document = load(config_path)
    block_range = find_block(document, nickname)
    if block_range is None:
        return None

    _remove_range(document, block_range)
    return persist(config_path, render(document))
