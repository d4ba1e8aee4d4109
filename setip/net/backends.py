# This file is part of setip. See LICENSE file for license information.
import enum
import logging
import os
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple, Type

from setip import settings, subp, util, verify
from setip.exceptions import ApplyError, NoBackendDetected
from setip.intent import Mode, NetworkIntent

LOG = logging.getLogger(__name__)


class BackendKind(enum.Enum):
    NETWORK_MANAGER = "networkmanager"
    NETPLAN = "netplan"
    LEGACY_SCRIPTS = "network-scripts"


class NetworkBackend(ABC):
    """Persist a NetworkIntent with one network management system.

    All external commands go through ``runner``, which takes the same
    arguments as :py:func:`setip.subp.subp`.
    """

    kind: BackendKind
    # (command, package) that must be installed before apply() can run
    required_command: Optional[Tuple[str, str]] = None

    def __init__(self, cfg: Optional[dict] = None, runner=None):
        self.cfg = cfg or settings.CFG_BUILTIN
        self._runner: Callable = runner or subp.subp

    def _path(self, name: str) -> str:
        return util.get_cfg_by_path(
            self.cfg, ("paths", name), settings.CFG_BUILTIN["paths"][name]
        )

    def _run(self, cmd, description: str, **kwargs):
        """Run cmd, turning a failure into ApplyError."""
        try:
            return self._runner(cmd, **kwargs)
        except subp.ProcessExecutionError as e:
            util.logexc(LOG, "Running %s failed", cmd)
            raise ApplyError("%s: %s" % (description, e)) from e

    @abstractmethod
    def apply(self, intent: NetworkIntent, mode: Mode) -> Optional[int]:
        """Write intent to the persistent config and activate it.

        Return the prefix length that was written for the ip, or None when
        no ip was changed.
        """
        raise NotImplementedError()

    def verify(
        self,
        intent: NetworkIntent,
        prefix: Optional[int],
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
    ):
        """Wait until the new ip is bound to the interface.

        @raises: VerificationFailed when it is not seen before the timeout.
        """
        if not intent.ip:
            return
        if timeout is None:
            timeout = util.get_cfg_by_path(self.cfg, "verify/timeout", 10.0)
        if interval is None:
            interval = util.get_cfg_by_path(self.cfg, "verify/interval", 0.5)
        verify.wait_for_address(
            intent.interface,
            intent.ip,
            prefix,
            timeout=timeout,
            interval=interval,
        )


def network_manager_active(runner=None) -> bool:
    """True when nmcli exists and the NetworkManager unit is not down."""
    runner = runner or subp.subp
    if not subp.which("nmcli"):
        return False
    try:
        (out, _err) = runner(["systemctl", "list-unit-files", "--no-pager"])
    except subp.ProcessExecutionError:
        util.logexc(LOG, "Unable to list systemd unit files")
        return False
    unit = "%s.service" % settings.NM_SERVICE
    if not any(line.startswith(unit) for line in out.splitlines()):
        LOG.debug("%s is not installed", unit)
        return False
    try:
        (out, _err) = runner(["systemctl", "is-active", settings.NM_SERVICE])
        status = out.strip()
    except subp.ProcessExecutionError as e:
        # is-active exits non-zero for anything but 'active'
        status = e.stdout.strip() if isinstance(e.stdout, str) else ""
    LOG.debug("%s status: %s", settings.NM_SERVICE, status)
    return status not in ("inactive", "failed")


def detect_backend(os_id: str, cfg: Optional[dict] = None, runner=None):
    """Return the BackendKind that owns the network config of this host.

    The order matters: an active NetworkManager wins even on Ubuntu hosts
    that also carry netplan files.

    @raises: NoBackendDetected
    """
    cfg = cfg or settings.CFG_BUILTIN
    paths = cfg.get("paths", settings.CFG_BUILTIN["paths"])
    if network_manager_active(runner):
        return BackendKind.NETWORK_MANAGER
    netplan_dir = paths.get("netplan_dir", settings.NETPLAN_DIR)
    if os_id == "ubuntu" and util.find_files(netplan_dir, "*.yaml"):
        return BackendKind.NETPLAN
    scripts_dir = paths.get(
        "network_scripts_dir", settings.NETWORK_SCRIPTS_DIR
    )
    if os_id != "ubuntu" and os.path.isdir(scripts_dir):
        return BackendKind.LEGACY_SCRIPTS
    raise NoBackendDetected(
        "Unable to find a supported network management method"
        " (NetworkManager, netplan or network-scripts)"
    )


def backend_class(kind: BackendKind) -> Type[NetworkBackend]:
    # imported here, the backends import this module for the base class
    from setip.net.netplan import NetplanBackend
    from setip.net.network_manager import NetworkManagerBackend
    from setip.net.sysconfig import SysconfigBackend

    name_to_backend: Dict[BackendKind, Type[NetworkBackend]] = {
        BackendKind.NETWORK_MANAGER: NetworkManagerBackend,
        BackendKind.NETPLAN: NetplanBackend,
        BackendKind.LEGACY_SCRIPTS: SysconfigBackend,
    }
    return name_to_backend[kind]


def get_backend(
    kind: BackendKind, cfg: Optional[dict] = None, runner=None
) -> NetworkBackend:
    backend = backend_class(kind)(cfg=cfg, runner=runner)
    LOG.debug("Using network backend %s", type(backend).__name__)
    return backend
