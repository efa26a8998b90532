"""Configuration management for mlds-access."""

import re
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from mldsaccess.ssh_config import NICKNAME_RULES, is_valid_nickname

SUPPORTED_KEY_TYPES = ("ed25519", "rsa", "ecdsa")

HOSTNAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9.-]*$")


def _validate_hostname(v: str) -> str:
    v = v.strip()
    if not HOSTNAME_PATTERN.match(v):
        raise ValueError(f"Invalid hostname: {v!r}")
    return v


class ClusterConfig(BaseModel):
    """Where the cluster lives and how access to it is named."""

    auth_host: str = Field(
        default="mlds-deepdish4.ads.northwestern.edu",
        description="Server that receives the public key (shared home directories)",
    )
    hostname: str = Field(
        default="wolf.analytics.private",
        description="HostName written into the SSH config entry",
    )
    gateway_host: str = Field(
        default="irc.mlds.northwestern.edu",
        description="Fully qualified host used for the connection test and as fallback",
    )
    default_nickname: str = Field(default="wolf", min_length=1)
    key_prefix: str = Field(default="mlds-access", min_length=1)
    key_type: str = Field(default="ed25519")
    setup_log_dir: str = Field(
        default="/nfs/home/shared/migration",
        description="Remote directory that collects setup success logs",
    )
    support_contact: str = Field(default="MLDS support")

    @field_validator("auth_host", "hostname", "gateway_host")
    @classmethod
    def valid_hostname(cls, v: str) -> str:
        """Validate host names."""
        return _validate_hostname(v)

    @field_validator("default_nickname")
    @classmethod
    def valid_nickname(cls, v: str) -> str:
        """Validate the default nickname is usable as an ssh host."""
        v = v.strip()
        if not is_valid_nickname(v):
            raise ValueError(f"default_nickname must use {NICKNAME_RULES}")
        return v

    @field_validator("key_prefix")
    @classmethod
    def no_whitespace(cls, v: str) -> str:
        """Validate value has no whitespace."""
        v = v.strip()
        if not v or any(c.isspace() for c in v):
            raise ValueError("must not be empty or contain whitespace")
        return v

    @field_validator("key_type")
    @classmethod
    def supported_key_type(cls, v: str) -> str:
        """Validate key type is one ssh-keygen supports."""
        v = v.strip().lower()
        if v not in SUPPORTED_KEY_TYPES:
            raise ValueError(f"key_type must be one of: {', '.join(SUPPORTED_KEY_TYPES)}")
        return v


class NetworkConfig(BaseModel):
    """Network prerequisites."""

    expected_networks: list[str] = Field(
        default_factory=lambda: ["eduroam"],
        description="WiFi networks that can reach the cluster without VPN",
    )


class SSHConfig(BaseModel):
    """Local SSH settings."""

    config_path: str = Field(default="~/.ssh/config", description="Path to SSH config file")
    ssh_dir: str = Field(default="~/.ssh", description="Directory for generated keys")
    connect_timeout: int = Field(
        default=10, ge=1, description="ConnectTimeout in seconds for non-interactive ssh"
    )


class AccessConfig(BaseModel):
    """Main mlds-access configuration."""

    model_config = ConfigDict(extra="forbid")

    cluster: ClusterConfig = Field(default_factory=ClusterConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    ssh: SSHConfig = Field(default_factory=SSHConfig)


class Config:
    """Manages mlds-access configuration with Pydantic validation."""

    CONFIG_DIR = Path.home() / ".config" / "mlds-access"
    CONFIG_FILE = CONFIG_DIR / "config.yaml"

    def __init__(self):
        """Initialize config manager."""
        self._config: AccessConfig | None = None

    @property
    def config(self) -> AccessConfig:
        """Get the validated configuration."""
        if self._config is None:
            raise ValueError("Configuration not loaded. Call load() first.")
        return self._config

    @classmethod
    def exists(cls) -> bool:
        """Check if config file exists."""
        return cls.CONFIG_FILE.exists()

    @classmethod
    def ensure_config_dir(cls) -> None:
        """Create config directory if it doesn't exist."""
        cls.CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        cls.CONFIG_DIR.chmod(0o700)

    def load(self) -> None:
        """
        Load and validate configuration.

        The file is optional: without it the built-in defaults for the MLDS
        cluster are used.
        """
        if not self.CONFIG_FILE.exists():
            self._config = AccessConfig()
            return

        with open(self.CONFIG_FILE) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config file {self.CONFIG_FILE} must contain a mapping")

        self._config = AccessConfig(**data)

    def create_default_config(self) -> None:
        """Replace the in-memory configuration with the defaults."""
        self._config = AccessConfig()

    def save(self) -> None:
        """Save configuration to file."""
        if self._config is None:
            raise ValueError("No configuration to save")

        self.ensure_config_dir()

        data = self._config.model_dump(mode="python")

        with open(self.CONFIG_FILE, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        self.CONFIG_FILE.chmod(0o600)
