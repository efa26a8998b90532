"""SSH key pair generation and validation."""

import base64
import hashlib
import subprocess
from pathlib import Path

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

from mldsaccess.config import SUPPORTED_KEY_TYPES

# Valid public key prefixes
PUBLIC_KEY_PREFIXES = (
    "ssh-rsa ",
    "ssh-ed25519 ",
    "ecdsa-sha2-nistp256 ",
    "ecdsa-sha2-nistp384 ",
    "ecdsa-sha2-nistp521 ",
    "sk-ssh-ed25519@openssh.com ",
    "sk-ecdsa-sha2-nistp256@openssh.com ",
)


class KeyGenerationError(Exception):
    """Raised when a key pair cannot be created or prepared."""

    pass


def get_key_name(key_prefix: str, netid: str) -> str:
    """
    Get the key file name for a NetID.

    Args:
        key_prefix: Prefix from the cluster config (e.g., "mlds-access")
        netid: User's NetID

    Returns:
        Key file name (e.g., "mlds-access-jdoe")
    """
    return f"{key_prefix}-{netid}"


def get_key_path(ssh_dir: str | Path, key_prefix: str, netid: str) -> Path:
    """Get the private key path inside the SSH directory."""
    return Path(ssh_dir).expanduser() / get_key_name(key_prefix, netid)


def get_public_key_path(key_path: Path) -> Path:
    """Get the public key path that ssh-keygen writes next to a private key."""
    return key_path.with_name(f"{key_path.name}.pub")


def generate_key_pair(key_path: Path, comment: str, key_type: str = "ed25519") -> None:
    """
    Generate a passphrase-less key pair with ssh-keygen.

    An existing pair at the same path is removed first so ssh-keygen does
    not stop to ask about overwriting.

    Args:
        key_path: Private key path (public key gets a .pub suffix)
        comment: Key comment (e.g., "MLDS access key for jdoe")
        key_type: One of ed25519, rsa, ecdsa

    Raises:
        KeyGenerationError: If the type is unsupported or ssh-keygen fails
    """
    if key_type not in SUPPORTED_KEY_TYPES:
        raise KeyGenerationError(
            f"Unsupported key type '{key_type}'. Use one of: {', '.join(SUPPORTED_KEY_TYPES)}"
        )

    public_key_path = get_public_key_path(key_path)

    try:
        key_path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
        key_path.unlink(missing_ok=True)
        public_key_path.unlink(missing_ok=True)
    except OSError as e:
        raise KeyGenerationError(f"Cannot prepare {key_path}: {e}") from e

    try:
        result = subprocess.run(
            ["ssh-keygen", "-t", key_type, "-f", str(key_path), "-N", "", "-C", comment],
            capture_output=True,
            text=True,
        )
    except OSError as e:
        raise KeyGenerationError(f"Failed to run ssh-keygen: {e}") from e

    if result.returncode != 0:
        detail = result.stderr.strip() or result.stdout.strip() or f"exit code {result.returncode}"
        raise KeyGenerationError(f"ssh-keygen failed: {detail}")

    if not key_path.exists() or not public_key_path.exists():
        raise KeyGenerationError(f"ssh-keygen did not create {key_path}")


def fix_key_permissions(key_path: Path) -> None:
    """
    Restrict the private key to its owner and make the public key readable.

    Raises:
        KeyGenerationError: If permissions cannot be changed
    """
    try:
        key_path.chmod(0o600)
        get_public_key_path(key_path).chmod(0o644)
    except OSError as e:
        raise KeyGenerationError(f"Failed to set permissions on {key_path}: {e}") from e


def validate_ssh_public_key(key_path: str | Path) -> None:
    """
    Validate that a file is a valid SSH public key.

    Args:
        key_path: Path to the SSH key file

    Raises:
        ValueError: If the file is not a valid SSH public key
        FileNotFoundError: If the file doesn't exist
    """
    path = Path(key_path).expanduser()

    if not path.exists():
        raise FileNotFoundError(f"SSH key not found: {key_path}")

    if not path.name.endswith(".pub"):
        raise ValueError(
            f"SSH key file must be a public key (*.pub): {key_path}\n"
            f"Private keys should NEVER be copied to a server."
        )

    try:
        content = path.read_text().strip()
    except (OSError, UnicodeDecodeError) as e:
        raise ValueError(f"Cannot read SSH key file: {e}") from e

    if not content:
        raise ValueError(f"SSH key file is empty: {key_path}")

    if not content.startswith(PUBLIC_KEY_PREFIXES):
        raise ValueError(
            f"File does not appear to be a valid SSH public key: {key_path}\n"
            f"Public keys should start with: {', '.join(p.strip() for p in PUBLIC_KEY_PREFIXES)}"
        )


def read_ssh_key_content(key_path: str | Path) -> str:
    """Read SSH public key content."""
    path = Path(key_path).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"SSH key not found: {key_path}")

    return path.read_text().strip()


def compute_ssh_key_fingerprint(public_key: str) -> str:
    """
    Compute the SHA256 fingerprint of an SSH public key.

    Args:
        public_key: SSH public key content

    Returns:
        Fingerprint as printed by ``ssh-keygen -l`` (e.g., "SHA256:abc...")

    Raises:
        ValueError: If key format is invalid
    """
    parts = public_key.strip().split()
    if len(parts) < 2:
        raise ValueError("Invalid SSH public key format")

    try:
        serialization.load_ssh_public_key(public_key.strip().encode())
        key_data = base64.b64decode(parts[1], validate=True)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise ValueError(f"Failed to compute SSH key fingerprint: {e}") from e

    digest = base64.b64encode(hashlib.sha256(key_data).digest()).decode().rstrip("=")
    return f"SHA256:{digest}"
