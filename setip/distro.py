# This file is part of setip. See LICENSE file for license information.
"""Identify the running distribution and install missing commands."""

import logging
import re
from collections import namedtuple
from typing import Callable, Optional

from setip import settings, subp, util
from setip.exceptions import ApplyError, UnsupportedPlatform

LOG = logging.getLogger(__name__)

OSInfo = namedtuple(
    "OSInfo", ["id", "version_major", "version_minor", "package_manager"]
)

PACKAGE_MANAGERS = {
    "ubuntu": "apt",
    "centos": "yum",
    "rhel": "yum",
}


def _parse_version(version_id: str):
    """Return (major, minor) from an os-release VERSION_ID like '18.04'."""
    major, _, rest = version_id.partition(".")
    minor = rest.partition(".")[0]
    try:
        return int(major), int(minor or 0)
    except ValueError:
        return None


def _redhat_release_version(release_file=None) -> str:
    """Return the full release version from /etc/redhat-release.

    CentOS 7 only publishes the major version in os-release, the minor
    version is read from here instead:
        CentOS Linux release 7.9.2009 (Core) => "7.9.2009"
    """
    release_file = release_file or settings.REDHAT_RELEASE_FILE
    try:
        content = util.load_text_file(release_file)
    except OSError:
        return ""
    match = re.search(r" release (?P<version>[\d.]+)", content)
    return match.group("version") if match else ""


def detect_os(
    os_release: Optional[str] = None, redhat_release: Optional[str] = None
) -> OSInfo:
    """Read the distribution identity from os-release.

    @raises: UnsupportedPlatform when the file is missing, the distribution
        is not ubuntu/centos/rhel, or the version is older than the
        supported floor.
    """
    os_release = os_release or settings.OS_RELEASE_FILE
    try:
        content = util.load_text_file(os_release)
    except OSError as e:
        raise UnsupportedPlatform(
            "Unable to identify the system: cannot read %s" % os_release
        ) from e
    info = util.load_shell_content(content)
    os_id = info.get("ID", "unknown").lower()
    version_id = info.get("VERSION_ID", "0")

    if os_id not in settings.MIN_OS_VERSIONS:
        raise UnsupportedPlatform(
            "Unsupported system (%s %s): only Ubuntu 18.04+ and"
            " CentOS/RHEL 7.5+ are supported" % (os_id, version_id)
        )
    if os_id in ("centos", "rhel") and "." not in version_id:
        version_id = _redhat_release_version(redhat_release) or version_id
    version = _parse_version(version_id)
    floor = settings.MIN_OS_VERSIONS[os_id]
    if version is None or version < floor:
        raise UnsupportedPlatform(
            "%s %s is too old, %s.%s or newer is required"
            % (os_id, version_id, floor[0], floor[1])
        )
    LOG.debug("Detected os %s %s.%s", os_id, version[0], version[1])
    return OSInfo(os_id, version[0], version[1], PACKAGE_MANAGERS[os_id])


def package_command(os_info: OSInfo, command: str, pkgs=None):
    """Return the argv to run a package manager command non interactively."""
    if os_info.package_manager == "apt":
        cmd = ["apt-get", "-y", command]
    else:
        cmd = ["yum", "-y", command]
    cmd.extend(pkgs or [])
    return cmd


def install_package(
    os_info: OSInfo, pkg: str, runner: Optional[Callable] = None
):
    runner = runner or subp.subp
    if os_info.package_manager == "apt":
        try:
            runner(package_command(os_info, "update"))
        except subp.ProcessExecutionError:
            util.logexc(LOG, "Failed to refresh apt package lists")
    try:
        runner(package_command(os_info, "install", [pkg]), capture=False)
    except subp.ProcessExecutionError as e:
        raise ApplyError("Failed to install package %s: %s" % (pkg, e)) from e


def ensure_command(
    cmd: str, pkg: str, os_info: OSInfo, runner: Optional[Callable] = None
) -> bool:
    """Install pkg when cmd is not on PATH.

    Return True when something was installed.
    """
    if subp.which(cmd):
        return False
    print("[INFO] Command %s is missing, installing %s ..." % (cmd, pkg))
    install_package(os_info, pkg, runner=runner)
    return True
