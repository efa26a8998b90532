"""Tests for the setup, config-ssh, test and init commands."""

from pathlib import Path
from unittest.mock import patch

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519
from typer.testing import CliRunner

from mldsaccess.config import AccessConfig, Config, SSHConfig
from mldsaccess.main import app

runner = CliRunner()

SETUP_ARGS = ["setup", "--netid", "jdoe", "--nickname", "wolf", "--update", "--new-key"]


@pytest.fixture
def ssh_dir(tmp_path):
    """Create a temporary ~/.ssh."""
    ssh_dir = tmp_path / ".ssh"
    ssh_dir.mkdir(mode=0o700)
    return ssh_dir


@pytest.fixture
def settings(ssh_dir):
    """Return settings pointing at the temporary SSH directory."""
    return AccessConfig(
        ssh=SSHConfig(config_path=str(ssh_dir / "config"), ssh_dir=str(ssh_dir))
    )


@pytest.fixture
def mock_load_settings(settings):
    """Make the commands use the temporary settings."""
    with patch("mldsaccess.main.load_settings", return_value=settings) as mock:
        yield mock


def fake_generate_key_pair(key_path: Path, comment: str, key_type: str = "ed25519") -> None:
    """Write a real ed25519 key pair where ssh-keygen would."""
    private_key = ed25519.Ed25519PrivateKey.generate()
    public_key = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.OpenSSH,
        format=serialization.PublicFormat.OpenSSH,
    )
    key_path.parent.mkdir(parents=True, exist_ok=True)
    key_path.write_text("PRIVATE KEY\n")
    key_path.with_name(f"{key_path.name}.pub").write_text(f"{public_key.decode()} {comment}\n")


@pytest.fixture
def mock_remote():
    """Patch every operation that touches the network or the host system."""
    with (
        patch("mldsaccess.main.find_missing_tools", return_value=[]) as find_missing_tools,
        patch("mldsaccess.main.get_wifi_name", return_value="eduroam") as get_wifi_name,
        patch(
            "mldsaccess.main.generate_key_pair", side_effect=fake_generate_key_pair
        ) as generate_key_pair,
        patch("mldsaccess.main.install_public_key", return_value=True) as install_public_key,
        patch("mldsaccess.main.check_connectivity", return_value=True) as check_connectivity,
        patch("mldsaccess.main.append_remote_log", return_value=True) as append_remote_log,
    ):
        yield {
            "find_missing_tools": find_missing_tools,
            "get_wifi_name": get_wifi_name,
            "generate_key_pair": generate_key_pair,
            "install_public_key": install_public_key,
            "check_connectivity": check_connectivity,
            "append_remote_log": append_remote_log,
        }


class TestSetupCommand:
    """Tests for the setup command."""

    def test_successful_setup(self, mock_load_settings, mock_remote, ssh_dir):
        """Test the full flow writes the key and the SSH config entry."""
        result = runner.invoke(app, SETUP_ARGS)

        assert result.exit_code == 0, result.output
        assert "Setup complete" in result.output

        key_path = ssh_dir / "mlds-access-jdoe"
        assert key_path.exists()
        assert key_path.stat().st_mode & 0o777 == 0o600

        config_text = (ssh_dir / "config").read_text()
        assert "Host wolf\n" in config_text
        assert "    HostName wolf.analytics.private\n" in config_text
        assert "    User jdoe\n" in config_text
        assert f"    IdentityFile {key_path}\n" in config_text

        install_target = mock_remote["install_public_key"].call_args[0][0]
        assert install_target.host == "mlds-deepdish4.ads.northwestern.edu"
        assert install_target.user == "jdoe"

        test_target = mock_remote["check_connectivity"].call_args[0][0]
        assert test_target.host == "wolf"
        assert test_target.ssh_config_file == str(ssh_dir / "config")

        log_target, log_path, log_line = mock_remote["append_remote_log"].call_args[0]
        assert log_target.host == "wolf"
        assert log_path.startswith("/nfs/home/shared/migration/jdoe_")
        assert log_line.endswith("Setup successful from eduroam")

    def test_missing_tools(self, mock_load_settings, mock_remote):
        """Test setup stops when OpenSSH is missing."""
        mock_remote["find_missing_tools"].return_value = ["ssh-copy-id"]

        result = runner.invoke(app, SETUP_ARGS)

        assert result.exit_code == 1
        assert "ssh-copy-id" in result.output
        mock_remote["generate_key_pair"].assert_not_called()

    @patch("mldsaccess.main.Confirm.ask", return_value=False)
    def test_unexpected_network_declined(self, mock_confirm, mock_load_settings, mock_remote):
        """Test setup stops when off campus and not on the VPN."""
        mock_remote["get_wifi_name"].return_value = "Starbucks"

        result = runner.invoke(app, SETUP_ARGS)

        assert result.exit_code == 1
        mock_confirm.assert_called_once()
        mock_remote["generate_key_pair"].assert_not_called()

    @patch("mldsaccess.main.Confirm.ask", return_value=True)
    def test_unexpected_network_confirmed(self, mock_confirm, mock_load_settings, mock_remote):
        """Test setup continues when the user confirms the VPN."""
        mock_remote["get_wifi_name"].return_value = None

        result = runner.invoke(app, SETUP_ARGS)

        assert result.exit_code == 0, result.output
        assert mock_remote["append_remote_log"].call_args[0][2].endswith("unknown network")

    def test_skip_network_check(self, mock_load_settings, mock_remote):
        """Test the network check can be skipped."""
        result = runner.invoke(app, [*SETUP_ARGS, "--skip-network-check"])

        assert result.exit_code == 0, result.output
        mock_remote["get_wifi_name"].assert_not_called()

    @patch("mldsaccess.main.Confirm.ask", return_value=False)
    def test_unusual_netid_declined(self, mock_confirm, mock_load_settings, mock_remote):
        """Test an unusual NetID can be rejected by the user."""
        args = ["setup", "--netid", "J.Doe", "--nickname", "wolf", "--update"]

        result = runner.invoke(app, args)

        assert result.exit_code == 1
        mock_remote["generate_key_pair"].assert_not_called()

    def test_unusable_netid(self, mock_load_settings, mock_remote):
        """Test a NetID that could be read as an ssh option is refused."""
        with patch("mldsaccess.main.Confirm.ask", return_value=True):
            result = runner.invoke(app, ["setup", "--netid=-oProxyCommand=x"])

        assert result.exit_code == 1
        mock_remote["generate_key_pair"].assert_not_called()

    @patch("mldsaccess.main.Prompt.ask", return_value="jdoe")
    def test_netid_prompt(self, mock_prompt, mock_load_settings, mock_remote, ssh_dir):
        """Test the NetID is asked for when not given."""
        result = runner.invoke(app, ["setup", "--nickname", "wolf", "--update"])

        assert result.exit_code == 0, result.output
        assert (ssh_dir / "mlds-access-jdoe").exists()

    def test_invalid_nickname_option(self, mock_load_settings, mock_remote, ssh_dir):
        """Test a bad --nickname stops setup before any key is made."""
        args = ["setup", "--netid", "jdoe", "--nickname", "_wolf", "--update", "--new-key"]
        result = runner.invoke(app, args)

        assert result.exit_code == 1
        assert "Invalid nickname" in result.output
        mock_remote["generate_key_pair"].assert_not_called()
        mock_remote["install_public_key"].assert_not_called()
        assert not (ssh_dir / "config").exists()

    @patch("mldsaccess.main.Prompt.ask", side_effect=["my wolf", "mlds"])
    def test_invalid_nickname_prompt_asks_again(
        self, mock_prompt, mock_load_settings, mock_remote, ssh_dir
    ):
        """Test a bad nickname typed at the prompt is asked for again."""
        result = runner.invoke(app, ["setup", "--netid", "jdoe", "--update", "--new-key"])

        assert result.exit_code == 0, result.output
        assert mock_prompt.call_count == 2
        assert "Invalid nickname 'my wolf'" in result.output
        text = (ssh_dir / "config").read_text()
        assert "Host mlds\n" in text
        assert "my wolf" not in text

    def test_reuse_existing_key(self, mock_load_settings, mock_remote, ssh_dir):
        """Test an existing key pair is kept with --reuse-key."""
        fake_generate_key_pair(ssh_dir / "mlds-access-jdoe", "existing")
        original = (ssh_dir / "mlds-access-jdoe.pub").read_text()

        args = ["setup", "--netid", "jdoe", "--nickname", "wolf", "--update", "--reuse-key"]
        result = runner.invoke(app, args)

        assert result.exit_code == 0, result.output
        mock_remote["generate_key_pair"].assert_not_called()
        assert (ssh_dir / "mlds-access-jdoe.pub").read_text() == original

    def test_key_install_falls_back_to_gateway(self, mock_load_settings, mock_remote):
        """Test the gateway host is tried after the authentication server."""
        mock_remote["install_public_key"].side_effect = [False, True]

        result = runner.invoke(app, SETUP_ARGS)

        assert result.exit_code == 0, result.output
        hosts = [call[0][0].host for call in mock_remote["install_public_key"].call_args_list]
        assert hosts == ["mlds-deepdish4.ads.northwestern.edu", "irc.mlds.northwestern.edu"]

    def test_key_install_failure_still_completes(self, mock_load_settings, mock_remote, ssh_dir):
        """Test a failed key copy is reported but setup continues."""
        mock_remote["install_public_key"].return_value = False

        result = runner.invoke(app, SETUP_ARGS)

        assert result.exit_code == 0, result.output
        assert "Failed to copy SSH key" in result.output
        assert "Setup complete" in result.output
        assert (ssh_dir / "config").exists()

    def test_strict_fails_on_key_install(self, mock_load_settings, mock_remote):
        """Test --strict turns a failed key copy into a failing exit code."""
        mock_remote["install_public_key"].return_value = False

        result = runner.invoke(app, [*SETUP_ARGS, "--strict"])

        assert result.exit_code == 1
        assert "Setup complete" in result.output

    def test_connection_falls_back_to_gateway(self, mock_load_settings, mock_remote):
        """Test the connection is retried once against the gateway host."""
        mock_remote["check_connectivity"].side_effect = [False, True]

        result = runner.invoke(app, SETUP_ARGS)

        assert result.exit_code == 0, result.output
        assert mock_remote["check_connectivity"].call_count == 2
        log_target = mock_remote["append_remote_log"].call_args[0][0]
        assert log_target.host == "irc.mlds.northwestern.edu"

    def test_connection_failure(self, mock_load_settings, mock_remote):
        """Test nothing is logged when both connection attempts fail."""
        mock_remote["check_connectivity"].return_value = False

        result = runner.invoke(app, SETUP_ARGS)

        assert result.exit_code == 0, result.output
        assert mock_remote["check_connectivity"].call_count == 2
        mock_remote["append_remote_log"].assert_not_called()

        strict = runner.invoke(app, [*SETUP_ARGS, "--strict"])
        assert strict.exit_code == 1

    def test_log_failure_is_not_fatal(self, mock_load_settings, mock_remote):
        """Test a failed remote log write only warns."""
        mock_remote["append_remote_log"].return_value = False

        result = runner.invoke(app, [*SETUP_ARGS, "--strict"])

        assert result.exit_code == 0, result.output
        assert "Could not write to log file" in result.output

    def test_no_log(self, mock_load_settings, mock_remote):
        """Test --no-log skips the remote log."""
        result = runner.invoke(app, [*SETUP_ARGS, "--no-log"])

        assert result.exit_code == 0, result.output
        mock_remote["append_remote_log"].assert_not_called()

    def test_existing_entry_kept(self, mock_load_settings, mock_remote, ssh_dir):
        """Test --no-update leaves an existing entry alone."""
        config_file = ssh_dir / "config"
        original = "Host wolf\n    HostName old.example.com\n    User jdoe\n"
        config_file.write_text(original)

        args = ["setup", "--netid", "jdoe", "--nickname", "wolf", "--no-update", "--new-key"]
        result = runner.invoke(app, args)

        assert result.exit_code == 0, result.output
        assert config_file.read_text() == original
        assert not list(ssh_dir.glob("config.backup.*"))

    @patch("mldsaccess.main.Confirm.ask", return_value=True)
    def test_existing_entry_replaced_after_prompt(
        self, mock_confirm, mock_load_settings, mock_remote, ssh_dir
    ):
        """Test an existing entry is replaced once, keeping other hosts."""
        config_file = ssh_dir / "config"
        config_file.write_text(
            "Host github.com\n    User git\n\n"
            "Host wolf\n    HostName old.example.com\n    User jdoe\n"
        )

        args = ["setup", "--netid", "jdoe", "--nickname", "wolf", "--new-key"]
        result = runner.invoke(app, args)

        assert result.exit_code == 0, result.output
        mock_confirm.assert_called_once()
        text = config_file.read_text()
        assert text.count("Host wolf\n") == 1
        assert "old.example.com" not in text
        assert text.startswith("Host github.com\n    User git\n")
        assert len(list(ssh_dir.glob("config.backup.*"))) == 1


class TestConfigSSHCommand:
    """Tests for the config-ssh command."""

    def test_adds_entry(self, mock_load_settings, ssh_dir):
        """Test the entry is written without touching keys or the network."""
        result = runner.invoke(app, ["config-ssh", "jdoe", "--nickname", "mlds"])

        assert result.exit_code == 0, result.output
        text = (ssh_dir / "config").read_text()
        assert "Host mlds\n" in text
        assert "ssh mlds" in result.output

    def test_custom_identity_file(self, mock_load_settings, ssh_dir, tmp_path):
        """Test --identity-file overrides the key path."""
        key = tmp_path / "other-key"
        result = runner.invoke(app, ["config-ssh", "jdoe", "-i", str(key)])

        assert result.exit_code == 0, result.output
        assert f"IdentityFile {key}" in (ssh_dir / "config").read_text()

    def test_remove(self, mock_load_settings, ssh_dir):
        """Test --remove deletes only the named entry."""
        config_file = ssh_dir / "config"
        config_file.write_text(
            "Host github.com\n    User git\n\nHost wolf\n    HostName wolf.analytics.private\n"
        )

        result = runner.invoke(app, ["config-ssh", "jdoe", "--remove"])

        assert result.exit_code == 0, result.output
        assert config_file.read_text() == "Host github.com\n    User git\n"
        assert "Backed up existing SSH config" in result.output
        assert len(list(ssh_dir.glob("config.backup.*"))) == 1

    def test_remove_reports_failed_backup(self, mock_load_settings, ssh_dir):
        """Test a failed backup is reported as a warning when removing."""
        config_file = ssh_dir / "config"
        config_file.write_text("Host github.com\n    User git\n\nHost wolf\n    User jdoe\n")

        with patch("mldsaccess.ssh_config.shutil.copy2", side_effect=OSError("denied")):
            result = runner.invoke(app, ["config-ssh", "jdoe", "--remove"])

        assert result.exit_code == 0, result.output
        assert "Failed to back up SSH config: denied" in result.output
        assert config_file.read_text() == "Host github.com\n    User git\n"
        assert list(ssh_dir.glob("config.backup.*")) == []

    def test_invalid_nickname(self, mock_load_settings, ssh_dir):
        """Test an alias ssh could not use is refused before writing."""
        result = runner.invoke(app, ["config-ssh", "jdoe", "--nickname", "_wolf"])

        assert result.exit_code == 1
        assert "Invalid nickname" in result.output
        assert not (ssh_dir / "config").exists()

    def test_mixed_line_endings_updated_once(self, mock_load_settings, ssh_dir):
        """Test an entry in a file with a stray CRLF line is replaced, not duplicated."""
        config_file = ssh_dir / "config"
        config_file.write_bytes(
            b"# pasted\r\nHost other\n    HostName o\n\nHost wolf\n    HostName old\n"
        )

        result = runner.invoke(app, ["config-ssh", "jdoe", "--update"])

        assert result.exit_code == 0, result.output
        content = config_file.read_bytes()
        assert content.count(b"Host wolf") == 1
        assert b"HostName old" not in content
        assert content.startswith(b"# pasted\r\nHost other\n")

    def test_remove_missing(self, mock_load_settings, ssh_dir):
        """Test removing an entry that isn't there."""
        result = runner.invoke(app, ["config-ssh", "jdoe", "--remove"])

        assert result.exit_code == 0
        assert "No SSH config entry" in result.output


class TestTestCommand:
    """Tests for the test command."""

    def test_missing_key(self, mock_load_settings):
        """Test the command fails before connecting when there is no key."""
        with patch("mldsaccess.main.check_connectivity") as mock_check:
            result = runner.invoke(app, ["test", "jdoe"])

        assert result.exit_code == 1
        assert "SSH key not found" in result.output
        mock_check.assert_not_called()

    def test_success(self, mock_load_settings, mock_remote, ssh_dir):
        """Test a working connection."""
        (ssh_dir / "mlds-access-jdoe").write_text("PRIVATE KEY\n")

        result = runner.invoke(app, ["test", "jdoe", "--no-log"])

        assert result.exit_code == 0, result.output
        target = mock_remote["check_connectivity"].call_args[0][0]
        assert target.identity_file == str(ssh_dir / "mlds-access-jdoe")
        mock_remote["append_remote_log"].assert_not_called()
        mock_remote["get_wifi_name"].assert_not_called()

    def test_failure(self, mock_load_settings, mock_remote, ssh_dir):
        """Test a failed connection exits with an error."""
        (ssh_dir / "mlds-access-jdoe").write_text("PRIVATE KEY\n")
        mock_remote["check_connectivity"].return_value = False

        result = runner.invoke(app, ["test", "jdoe"])

        assert result.exit_code == 1

    def test_invalid_netid(self, mock_load_settings):
        """Test NetIDs unusable as ssh users are refused."""
        result = runner.invoke(app, ["test", "--", "-oProxyCommand=x"])

        assert result.exit_code == 1

    def test_invalid_nickname(self, mock_load_settings, mock_remote, ssh_dir):
        """Test an alias ssh could not use is refused before connecting."""
        (ssh_dir / "mlds-access-jdoe").write_text("PRIVATE KEY\n")

        result = runner.invoke(app, ["test", "jdoe", "--nickname", "_wolf", "--no-log"])

        assert result.exit_code == 1
        mock_remote["check_connectivity"].assert_not_called()


class TestInitCommand:
    """Tests for the init command."""

    @pytest.fixture
    def temp_config_dir(self, tmp_path, monkeypatch):
        config_dir = tmp_path / ".config" / "mlds-access"
        monkeypatch.setattr(Config, "CONFIG_DIR", config_dir)
        monkeypatch.setattr(Config, "CONFIG_FILE", config_dir / "config.yaml")
        return config_dir

    def test_writes_default_config(self, temp_config_dir):
        """Test init creates the config file."""
        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0, result.output
        assert (temp_config_dir / "config.yaml").exists()

    def test_refuses_to_overwrite(self, temp_config_dir):
        """Test init keeps an existing config unless forced."""
        temp_config_dir.mkdir(parents=True)
        (temp_config_dir / "config.yaml").write_text("cluster:\n  key_type: rsa\n")

        result = runner.invoke(app, ["init"])
        assert result.exit_code == 1

        forced = runner.invoke(app, ["init", "--force"])
        assert forced.exit_code == 0
        assert "ed25519" in (temp_config_dir / "config.yaml").read_text()
