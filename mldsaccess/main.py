"""Main CLI application for mlds-access."""

import posixpath
import re
import shutil
import sys
from datetime import datetime
from pathlib import Path

import typer
from pydantic import BaseModel, ValidationError
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from mldsaccess.config import AccessConfig, Config
from mldsaccess.keys import (
    KeyGenerationError,
    compute_ssh_key_fingerprint,
    fix_key_permissions,
    generate_key_pair,
    get_key_path,
    get_public_key_path,
    read_ssh_key_content,
    validate_ssh_public_key,
)
from mldsaccess.network import get_wifi_name, is_expected_network
from mldsaccess.remote import (
    RemoteError,
    RemoteTarget,
    append_remote_log,
    check_connectivity,
    install_public_key,
    make_target,
    with_fallback,
)
from mldsaccess.ssh_config import (
    HostBlock,
    NICKNAME_RULES,
    PersistResult,
    SSHConfigError,
    UpdatePolicy,
    UpsertResult,
    add_ssh_host,
    get_ssh_host,
    host_exists,
    is_valid_nickname,
    remove_ssh_host,
)
from mldsaccess.ui import (
    console,
    display_host_block,
    display_summary,
    print_debug,
    print_error,
    print_info,
    print_success,
    print_warning,
)

app = typer.Typer(
    name="mlds-access",
    help="Set up SSH access to the MLDS research cluster",
)

SSH_CONFIG_TUTORIAL_URL = "https://linuxize.com/post/using-the-ssh-config-file/"

DEFAULT_SSH_CONFIG_PATH = "~/.ssh/config"

# Northwestern NetIDs are lowercase letters and digits
NETID_PATTERN = re.compile(r"^[a-z0-9]+$")

# Anything else still has to be usable as a file name and an SSH user name
USABLE_NETID_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9._-]*$")


class SetupContext(BaseModel):
    """State carried through the setup steps."""

    netid: str
    nickname: str
    key_path: Path
    policy: UpdatePolicy | None = None
    wifi_name: str | None = None
    strict: bool = False
    verbose: bool = False


# Helper functions


def load_settings() -> AccessConfig:
    """
    Load configuration, falling back to built-in defaults.

    Raises:
        typer.Exit: If the config file exists but is invalid
    """
    config_manager = Config()
    try:
        config_manager.load()
    except Exception as e:
        print_error(f"Error loading config: {e}")
        console.print(
            "[yellow]Config file may be invalid. Try running[/yellow] "
            "[cyan]mlds-access init --force[/cyan]"
        )
        raise typer.Exit(1)

    return config_manager.config


def get_required_tools(platform: str | None = None) -> list[str]:
    """
    Get the OpenSSH tools the setup needs.

    ssh-copy-id is not shipped with Windows OpenSSH; the key is piped over
    ssh there instead.
    """
    platform = platform or sys.platform
    tools = ["ssh", "ssh-keygen"]
    if platform not in ("win32", "cygwin"):
        tools.append("ssh-copy-id")
    return tools


def find_missing_tools(tools: list[str]) -> list[str]:
    """Return the tools that are not on PATH."""
    return [tool for tool in tools if shutil.which(tool) is None]


def is_valid_netid(netid: str) -> bool:
    """Check a NetID looks like a Northwestern NetID."""
    return bool(NETID_PATTERN.match(netid))


def is_usable_netid(netid: str) -> bool:
    """Check a NetID can safely be used in key file names and as an SSH user."""
    return bool(USABLE_NETID_PATTERN.match(netid))


def format_identity_path(key_path: Path) -> str:
    """
    Format a key path for the SSH config, using ~ for the home directory.

    Args:
        key_path: Absolute private key path

    Returns:
        Path string such as "~/.ssh/mlds-access-jdoe"
    """
    try:
        relative = key_path.relative_to(Path.home())
    except ValueError:
        return str(key_path)
    return f"~/{relative.as_posix()}"


def build_host_block(ctx: SetupContext, config: AccessConfig) -> HostBlock:
    """Build the SSH config entry for the cluster."""
    return HostBlock(
        nickname=ctx.nickname,
        hostname=config.cluster.hostname,
        user=ctx.netid,
        identity_file=format_identity_path(ctx.key_path),
    )


def get_ssh_config_override(config: AccessConfig) -> str | None:
    """Get the SSH config path to pass to ssh with -F, if not the default."""
    if config.ssh.config_path == DEFAULT_SSH_CONFIG_PATH:
        return None
    return str(Path(config.ssh.config_path).expanduser())


def build_log_path(log_dir: str, netid: str, now: datetime) -> str:
    """Get the remote log file path for a setup run."""
    return posixpath.join(log_dir, f"{netid}_{now:%Y%m%d%H%M%S}.log")


def build_log_line(wifi_name: str | None, now: datetime) -> str:
    """Get the line recorded in the remote setup log."""
    return f"[{now:%Y-%m-%d %H:%M:%S}] Setup successful from {wifi_name or 'unknown network'}"


def check_required_tools() -> None:
    """
    Verify OpenSSH tools are installed.

    Raises:
        typer.Exit: If any tool is missing
    """
    print_info("Checking required tools")
    missing = find_missing_tools(get_required_tools())
    if missing:
        print_error(f"SSH tools not found ({', '.join(missing)}). Please install OpenSSH.")
        raise typer.Exit(1)
    print_success("Required tools found")


def check_network(config: AccessConfig, skip: bool, verbose: bool) -> str | None:
    """
    Check the workstation is on a network that can reach the cluster.

    The check is advisory: the user can confirm they are on the VPN.

    Returns:
        Detected WiFi name (None if unknown)

    Raises:
        typer.Exit: If the user is not on an expected network or VPN
    """
    if skip:
        print_info("Skipping network check")
        return None

    print_info("Checking WiFi connection (this may take a few seconds)...")
    wifi_name = get_wifi_name()
    print_debug(f"Detected WiFi network: {wifi_name!r}", verbose)

    expected = config.network.expected_networks
    if is_expected_network(wifi_name, expected):
        print_success(f"Connected to {wifi_name} WiFi")
        return wifi_name

    expected_names = " or ".join(expected) if expected else "campus"
    print_warning(
        f"You don't seem to be on {expected_names} WiFi. "
        f"Network name: {wifi_name or 'unknown'}"
    )
    print_info(
        f"This setup requires either {expected_names} WiFi or Northwestern VPN "
        "connection to work properly"
    )
    print_info(f"If you are on Northwestern VPN or {expected_names}, you may continue")

    if not Confirm.ask(
        f"[cyan]Are you connected to Northwestern VPN or {expected_names}?[/cyan]",
        default=False,
    ):
        print_error(f"Not connected to Northwestern VPN or {expected_names} WiFi")
        print_info(
            f"Please connect to Northwestern VPN or {expected_names} WiFi before running setup"
        )
        raise typer.Exit(1)

    print_success("Continuing with Northwestern VPN connection")
    return wifi_name


def collect_netid(config: AccessConfig, netid: str | None) -> str:
    """
    Get the user's NetID from the option or a prompt and check its format.

    Raises:
        typer.Exit: If the NetID is empty, unusable, or the user declines
            to continue with an unusual one
    """
    if netid is None:
        if not Path(config.ssh.config_path).expanduser().exists():
            print_warning(f"No SSH config found at {config.ssh.config_path}")
            print_info("An SSH config file helps you organize and simplify SSH connections.")
            print_info(
                "After this setup, we'll create one for you, "
                "but you might want to learn more about them."
            )
            print_info(f"Tutorial: {SSH_CONFIG_TUTORIAL_URL}")
        netid = Prompt.ask("[cyan]Please enter your Northwestern NetID[/cyan]")

    netid = (netid or "").strip()
    if not netid:
        print_error("NetID is required")
        raise typer.Exit(1)

    print_info(f"NetID set to: {netid}")

    if not is_valid_netid(netid):
        print_warning(
            "NetID format looks unusual. Northwestern NetIDs typically contain "
            "only lowercase letters and numbers."
        )
        if not Confirm.ask("[cyan]Continue with this NetID?[/cyan]", default=False):
            print_error("Exiting at user request")
            raise typer.Exit(1)

    if not is_usable_netid(netid):
        print_error(f"NetID '{netid}' cannot be used as an SSH user name")
        raise typer.Exit(1)

    return netid


def collect_nickname(config: AccessConfig, nickname: str | None) -> str:
    """
    Get the SSH config alias from the option or a prompt.

    An invalid answer at the prompt is asked again.

    Raises:
        typer.Exit: If the alias given as an option is invalid
    """
    default = config.cluster.default_nickname

    while True:
        value = nickname
        if value is None:
            value = Prompt.ask("[cyan]Enter a nickname for the server[/cyan]", default=default)
        value = (value or "").strip() or default

        if is_valid_nickname(value):
            return value

        print_error(f"Invalid nickname '{value}'. Use {NICKNAME_RULES}.")
        if nickname is not None:
            raise typer.Exit(1)


def ensure_key_pair(ctx: SetupContext, config: AccessConfig, new_key: bool | None) -> str:
    """
    Make sure the access key pair exists, generating it if needed.

    Args:
        ctx: Setup context
        config: Loaded configuration
        new_key: True to always regenerate, False to reuse, None to ask

    Returns:
        Fingerprint of the public key

    Raises:
        typer.Exit: If the key cannot be generated or is invalid
    """
    key_path = ctx.key_path
    public_key_path = get_public_key_path(key_path)

    print_info("Checking for existing SSH keys")
    generate = True

    if key_path.exists() and public_key_path.exists():
        print_warning(f"SSH key already exists at {key_path}")
        if new_key is None:
            new_key = Confirm.ask(
                "[cyan]Do you want to generate a new key and overwrite it?[/cyan]",
                default=False,
            )
        generate = new_key
        if not generate:
            print_info("Using existing key")
    elif key_path.exists():
        print_warning(f"Public key missing for {key_path}, generating a new key pair")

    if generate:
        print_info("Generating new SSH key pair")
        try:
            generate_key_pair(
                key_path,
                comment=f"MLDS access key for {ctx.netid}",
                key_type=config.cluster.key_type,
            )
        except KeyGenerationError as e:
            print_error(f"Failed to generate SSH key pair: {e}")
            raise typer.Exit(1)
        print_success("SSH key pair generated")

    try:
        fix_key_permissions(key_path)
    except KeyGenerationError as e:
        print_error(str(e))
        raise typer.Exit(1)
    print_success("Set proper permissions on key files")

    try:
        validate_ssh_public_key(public_key_path)
        fingerprint = compute_ssh_key_fingerprint(read_ssh_key_content(public_key_path))
    except (FileNotFoundError, ValueError) as e:
        print_error(str(e))
        console.print("[yellow]Run again with[/yellow] [cyan]--new-key[/cyan]")
        raise typer.Exit(1)

    print_debug(f"Key fingerprint: {fingerprint}", ctx.verbose)
    return fingerprint


def build_target(
    host: str,
    ctx: SetupContext,
    config: AccessConfig,
    with_key: bool = True,
    ssh_config_file: str | None = None,
) -> RemoteTarget:
    """
    Build a remote target for the user's account.

    Raises:
        typer.Exit: If the host or NetID cannot be used with ssh
    """
    try:
        return make_target(
            host=host,
            user=ctx.netid,
            identity_file=ctx.key_path if with_key else None,
            connect_timeout=config.ssh.connect_timeout,
            ssh_config_file=ssh_config_file,
        )
    except RemoteError as e:
        print_error(f"Cannot connect to {host} as {ctx.netid}: {e}")
        raise typer.Exit(1)


def install_key(ctx: SetupContext, config: AccessConfig) -> bool:
    """
    Copy the public key to the authentication server, then the gateway.

    Returns:
        True if the key was installed on either host
    """
    print_info("Copying SSH key to the cluster's shared home directories")
    print_info("You may be prompted for your Northwestern NetID password")

    primary = build_target(config.cluster.auth_host, ctx, config, with_key=False)
    fallback = build_target(config.cluster.gateway_host, ctx, config, with_key=False)

    def announce_fallback(failed: RemoteTarget, alternate: RemoteTarget) -> None:
        print_warning(f"Could not copy SSH key to {failed.host}")
        print_info(f"Trying {alternate.host} as a fallback...")

    result = with_fallback(
        lambda target: install_public_key(target, get_public_key_path(ctx.key_path)),
        primary,
        fallback,
        on_fallback=announce_fallback,
    )

    if result.succeeded:
        print_success(f"SSH key copied to {result.target.host}")
        return True

    print_error("Failed to copy SSH key. Please check your NetID and password.")
    print_info(f"If the problem persists, contact {config.cluster.support_contact}.")
    return False


def report_backup(persisted: PersistResult) -> None:
    """Print where the previous SSH config was saved, or why it wasn't."""
    if persisted.backup_path is not None:
        print_success(f"Backed up existing SSH config to {persisted.backup_path}")
    if persisted.backup_error is not None:
        print_warning(f"Failed to back up SSH config: {persisted.backup_error}")


def configure_ssh_entry(ctx: SetupContext, config: AccessConfig) -> UpsertResult:
    """
    Write or update the SSH config entry for the cluster.

    Returns:
        Outcome of the update

    Raises:
        typer.Exit: If the SSH config cannot be read or written
    """
    config_path = config.ssh.config_path

    try:
        block = build_host_block(ctx, config)
    except ValidationError as e:
        print_error(f"Invalid SSH config entry: {e.errors()[0]['msg']}")
        raise typer.Exit(1)

    print_info("Updating SSH config")
    policy = ctx.policy

    try:
        if host_exists(config_path, ctx.nickname):
            current = get_ssh_host(config_path, ctx.nickname)
            detail = f" (HostName {current})" if current else ""
            print_warning(
                f"An entry for '{ctx.nickname}' already exists in your SSH config{detail}"
            )
            if policy is None:
                policy = (
                    UpdatePolicy.REPLACE
                    if Confirm.ask("[cyan]Do you want to update it?[/cyan]", default=False)
                    else UpdatePolicy.SKIP
                )

        if ctx.verbose:
            display_host_block(block)

        result, persisted = add_ssh_host(config_path, block, policy or UpdatePolicy.REPLACE)
    except SSHConfigError as e:
        print_error(f"Failed to update SSH config: {e}")
        raise typer.Exit(1)

    if result == UpsertResult.SKIPPED:
        print_info("Skipping SSH config update")
        return result

    if persisted is not None:
        report_backup(persisted)

    if result == UpsertResult.REPLACED:
        print_success(f"Updated SSH config entry for [cyan]{ctx.nickname}[/cyan]")
    else:
        print_success(f"Added SSH config entry for [cyan]{ctx.nickname}[/cyan]")

    return result


def print_connection_checklist(config: AccessConfig) -> None:
    """Print what to check when the connection test fails."""
    print_error("Connection test failed. Please check the following:")
    print_info("1. Ensure you entered the correct NetID")
    print_info("2. Make sure the shared home directory server is accessible")
    print_info("3. Verify that your account is properly set up on the server")
    print_info(f"4. Check if the server hostname '{config.cluster.hostname}' resolves correctly")


def log_setup(target: RemoteTarget, ctx: SetupContext, config: AccessConfig) -> bool:
    """Record the successful setup in the shared log directory. Best effort."""
    print_info("Logging successful setup")
    now = datetime.now()
    log_path = build_log_path(config.cluster.setup_log_dir, ctx.netid, now)
    print_debug(f"Remote log file: {log_path}", ctx.verbose)

    if append_remote_log(target, log_path, build_log_line(ctx.wifi_name, now)):
        print_success("Setup logged successfully")
        return True

    print_warning("Could not write to log file, but setup was successful")
    return False


def verify_connection(ctx: SetupContext, config: AccessConfig, log: bool = True) -> bool:
    """
    Test key-based login through the SSH config alias, then the full hostname.

    Returns:
        True if either connection worked
    """
    print_info("Testing connection to the server")
    print_info(
        "Attempting to connect to the server and create a file. "
        "This will be deleted immediately."
    )

    primary = build_target(
        ctx.nickname, ctx, config, ssh_config_file=get_ssh_config_override(config)
    )
    fallback = build_target(config.cluster.gateway_host, ctx, config)

    def announce_fallback(failed: RemoteTarget, alternate: RemoteTarget) -> None:
        print_connection_checklist(config)
        print_info("Trying connection with full hostname as a fallback...")
        print_debug(f"Fallback host: {alternate.host}", ctx.verbose)

    result = with_fallback(check_connectivity, primary, fallback, on_fallback=announce_fallback)

    if not result.succeeded:
        if result.used_fallback:
            print_error(
                "Connection failed with full hostname as well. "
                f"Please contact {config.cluster.support_contact} for assistance."
            )
        else:
            print_connection_checklist(config)
        return False

    if result.used_fallback:
        print_success(
            "Connection successful using full hostname. Your SSH key works, "
            "but there might be an issue with your SSH config."
        )
    else:
        print_success("Connection test passed. Your SSH key is working correctly")

    if log:
        log_setup(result.target, ctx, config)

    return True


def print_completion(ctx: SetupContext, config: AccessConfig) -> None:
    """Print the closing message."""
    console.print()
    console.print(Panel.fit("[bold green]Setup complete![/bold green]", border_style="green"))
    print_warning(
        f"CAVEAT! The {config.cluster.default_nickname} server is not yet "
        "transitioned to local login!!"
    )
    console.print(
        "Once the server *IS* transitioned to local login, simply type: "
        f"[cyan]ssh {ctx.nickname}[/cyan]"
    )
    print_info("But if you try this now, it will still be slow or potentially fail.")


# Commands


@app.command()
def setup(
    netid: str | None = typer.Option(None, "--netid", "-n", help="Northwestern NetID"),
    nickname: str | None = typer.Option(
        None, "--nickname", help="SSH config alias for the server (default: wolf)"
    ),
    update: bool | None = typer.Option(
        None,
        "--update/--no-update",
        help="Replace or keep an existing SSH config entry (asks if omitted)",
    ),
    new_key: bool | None = typer.Option(
        None,
        "--new-key/--reuse-key",
        help="Regenerate or reuse an existing key (asks if omitted)",
    ),
    skip_network_check: bool = typer.Option(
        False, "--skip-network-check", help="Don't check for eduroam/VPN"
    ),
    no_log: bool = typer.Option(False, "--no-log", help="Don't record the setup remotely"),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit with an error if the key could not be copied or the connection failed",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug output"),
) -> None:
    """
    Set up SSH access to the MLDS cluster.

    Generates a key pair, copies it to the cluster, adds an entry to your
    SSH config and tests the connection.
    """
    console.print(
        Panel.fit(
            "[bold cyan]MLDS SSH access setup[/bold cyan]\n\n"
            "This will create an SSH key, install it on the cluster\n"
            "and add the server to your SSH config.",
            border_style="cyan",
        )
    )

    config = load_settings()
    if nickname is not None:
        nickname = collect_nickname(config, nickname)

    # Step 1: Prerequisites
    check_required_tools()
    wifi_name = check_network(config, skip_network_check, verbose)

    # Step 2: NetID
    user_netid = collect_netid(config, netid)

    ctx = SetupContext(
        netid=user_netid,
        nickname=config.cluster.default_nickname,
        key_path=get_key_path(config.ssh.ssh_dir, config.cluster.key_prefix, user_netid),
        policy=None if update is None else (UpdatePolicy.REPLACE if update else UpdatePolicy.SKIP),
        wifi_name=wifi_name,
        strict=strict,
        verbose=verbose,
    )

    # Step 3: Key pair
    fingerprint = ensure_key_pair(ctx, config, new_key)

    # Step 4: Install public key
    key_installed = install_key(ctx, config)

    # Step 5: SSH config
    ctx.nickname = collect_nickname(config, nickname)
    entry_result = configure_ssh_entry(ctx, config)

    # Step 6: Connection test
    connected = verify_connection(ctx, config, log=not no_log)

    console.print()
    display_summary(
        [
            ("NetID", ctx.netid),
            ("Key", str(ctx.key_path)),
            ("Fingerprint", fingerprint),
            ("Key copied", "yes" if key_installed else "no"),
            ("SSH config", f"{ctx.nickname} ({entry_result.value})"),
            ("Connection", "ok" if connected else "failed"),
        ]
    )

    print_completion(ctx, config)

    if ctx.strict and not (key_installed and connected):
        raise typer.Exit(1)


@app.command(name="config-ssh")
def config_ssh(
    netid: str = typer.Argument(..., help="Northwestern NetID"),
    nickname: str | None = typer.Option(
        None, "--nickname", help="SSH config alias for the server (default: wolf)"
    ),
    identity_file: str | None = typer.Option(
        None, "--identity-file", "-i", help="SSH identity file path"
    ),
    update: bool | None = typer.Option(
        None,
        "--update/--no-update",
        help="Replace or keep an existing SSH config entry (asks if omitted)",
    ),
    remove: bool = typer.Option(False, "--remove", help="Remove the entry instead"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug output"),
) -> None:
    """Add or update only the SSH config entry for the cluster."""
    config = load_settings()
    alias = collect_nickname(config, nickname or config.cluster.default_nickname)
    user_netid = collect_netid(config, netid)

    if remove:
        try:
            persisted = remove_ssh_host(config.ssh.config_path, alias)
        except SSHConfigError as e:
            print_error(f"Failed to update SSH config: {e}")
            raise typer.Exit(1)
        if persisted is not None:
            report_backup(persisted)
            print_success(f"Removed SSH config entry for [cyan]{alias}[/cyan]")
        else:
            print_warning(f"No SSH config entry for '{alias}'")
        return

    if identity_file is not None:
        key_path = Path(identity_file).expanduser()
    else:
        key_path = get_key_path(config.ssh.ssh_dir, config.cluster.key_prefix, user_netid)

    ctx = SetupContext(
        netid=user_netid,
        nickname=alias,
        key_path=key_path,
        policy=None if update is None else (UpdatePolicy.REPLACE if update else UpdatePolicy.SKIP),
        verbose=verbose,
    )

    if not key_path.exists():
        print_warning(f"Identity file {key_path} does not exist yet")

    configure_ssh_entry(ctx, config)
    console.print("\n[bold]Connect with:[/bold]")
    console.print(f"  [cyan]ssh {alias}[/cyan]")


@app.command(name="test")
def connection_test(
    netid: str = typer.Argument(..., help="Northwestern NetID"),
    nickname: str | None = typer.Option(
        None, "--nickname", help="SSH config alias for the server (default: wolf)"
    ),
    identity_file: str | None = typer.Option(
        None, "--identity-file", "-i", help="SSH identity file path"
    ),
    no_log: bool = typer.Option(False, "--no-log", help="Don't record the result remotely"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug output"),
) -> None:
    """Test key-based login to the cluster."""
    config = load_settings()
    alias = collect_nickname(config, nickname or config.cluster.default_nickname)

    if not is_usable_netid(netid):
        print_error(f"NetID '{netid}' cannot be used as an SSH user name")
        raise typer.Exit(1)

    if identity_file is not None:
        key_path = Path(identity_file).expanduser()
    else:
        key_path = get_key_path(config.ssh.ssh_dir, config.cluster.key_prefix, netid)

    if not key_path.exists():
        print_error(f"SSH key not found: {key_path}")
        console.print("[yellow]Run[/yellow] [cyan]mlds-access setup[/cyan] [yellow]first[/yellow]")
        raise typer.Exit(1)

    ctx = SetupContext(
        netid=netid,
        nickname=alias,
        key_path=key_path,
        wifi_name=None if no_log else get_wifi_name(),
        verbose=verbose,
    )

    if not verify_connection(ctx, config, log=not no_log):
        raise typer.Exit(1)


@app.command()
def init(
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing configuration",
    ),
) -> None:
    """
    Write the default mlds-access configuration file.

    Edit ~/.config/mlds-access/config.yaml afterwards to point at other
    hosts or change key naming.
    """
    if Config.exists() and not force:
        console.print(
            f"[yellow]Configuration already exists at[/yellow] [cyan]{Config.CONFIG_FILE}[/cyan]"
        )
        console.print("[yellow]Use[/yellow] [cyan]--force[/cyan] [yellow]to overwrite[/yellow]")
        raise typer.Exit(1)

    config_manager = Config()
    config_manager.create_default_config()
    try:
        config_manager.save()
    except OSError as e:
        print_error(f"Failed to write config: {e}")
        raise typer.Exit(1)

    print_success(f"Wrote configuration to [cyan]{Config.CONFIG_FILE}[/cyan]")


@app.command()
def version():
    """Show the version of mlds-access."""
    from mldsaccess import __version__

    console.print(f"mlds-access version [cyan]{__version__}[/cyan]")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
