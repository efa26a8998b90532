"""Detect the WiFi network the workstation is connected to."""

import subprocess
import sys

# Seconds to wait for a network tool (system_profiler can be slow)
WIFI_QUERY_TIMEOUT = 30

MACOS_WIFI_INTERFACES = ("en0", "en1")


def parse_networksetup(output: str) -> str | None:
    """
    Parse ``networksetup -getairportnetwork <iface>`` output.

    Example: "Current Wi-Fi Network: eduroam"
    """
    for line in output.splitlines():
        if ":" in line and line.strip().startswith("Current"):
            name = line.split(":", 1)[1].strip()
            return name or None
    return None


def parse_system_profiler(output: str) -> str | None:
    """
    Parse ``system_profiler SPAirPortDataType`` output.

    The network name is the line following "Current Network Information:".
    """
    lines = output.splitlines()
    for index, line in enumerate(lines):
        if "Current Network" in line:
            for following in lines[index + 1 :]:
                name = following.strip().rstrip(":").strip()
                if name:
                    return name
            return None
    return None


def parse_nmcli(output: str) -> str | None:
    """
    Parse ``nmcli -t -f active,ssid dev wifi`` output.

    Lines look like "yes:eduroam"; colons inside the SSID are escaped.
    """
    for line in output.splitlines():
        active, _, ssid = line.partition(":")
        if active == "yes":
            ssid = ssid.replace("\\:", ":").strip()
            return ssid or None
    return None


def parse_netsh(output: str) -> str | None:
    """
    Parse ``netsh wlan show interfaces`` output.

    Example line: "    SSID                   : eduroam" (BSSID lines are skipped).
    """
    for line in output.splitlines():
        key, sep, value = line.partition(":")
        if sep and key.strip() == "SSID":
            return value.strip() or None
    return None


def _run(args: list[str]) -> str | None:
    try:
        result = subprocess.run(args, capture_output=True, text=True, timeout=WIFI_QUERY_TIMEOUT)
    except (subprocess.TimeoutExpired, OSError):
        return None

    if result.returncode != 0:
        return None

    return result.stdout


def _macos_wifi_name() -> str | None:
    for interface in MACOS_WIFI_INTERFACES:
        output = _run(["networksetup", "-getairportnetwork", interface])
        if output:
            name = parse_networksetup(output)
            if name:
                return name

    # Newer macOS releases hide the name from networksetup
    output = _run(["system_profiler", "SPAirPortDataType"])
    return parse_system_profiler(output) if output else None


def _linux_wifi_name() -> str | None:
    output = _run(["iwgetid", "-r"])
    if output and output.strip():
        return output.strip()

    output = _run(["nmcli", "-t", "-f", "active,ssid", "dev", "wifi"])
    return parse_nmcli(output) if output else None


def _windows_wifi_name() -> str | None:
    output = _run(["netsh", "wlan", "show", "interfaces"])
    return parse_netsh(output) if output else None


def get_wifi_name(platform: str | None = None) -> str | None:
    """
    Get the name of the current WiFi network.

    Args:
        platform: sys.platform value to query (default: this machine)

    Returns:
        Network name, or None if it cannot be determined
    """
    platform = platform or sys.platform

    if platform == "darwin":
        return _macos_wifi_name()
    if platform.startswith("linux"):
        return _linux_wifi_name()
    if platform in ("win32", "cygwin"):
        return _windows_wifi_name()

    return None


def is_expected_network(wifi_name: str | None, expected_networks: list[str]) -> bool:
    """Check whether the WiFi name is one of the networks that reach the cluster."""
    return wifi_name is not None and wifi_name in expected_networks
