#!/usr/bin/env python3

# This file is part of setip. See LICENSE file for license information.

"""Commandline utility to set the IPv4 address, gateway and DNS of a NIC."""

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import Callable, List, Optional

from setip import config, distro, intent, log, netinfo, settings, util
from setip import subp, verify, version
from setip.exceptions import InvalidArgument, SetipError
from setip.net import backends

LOG = logging.getLogger(__name__)

NAME = "setip"


@dataclass(frozen=True)
class RunContext:
    """Everything probed about the host, passed explicitly between stages."""

    cfg: dict
    os_info: distro.OSInfo
    backend: backends.BackendKind
    interface: str


def get_parser(parser=None):
    """Build or extend an arg parser for the setip utility.

    @param parser: Optional existing ArgumentParser instance which will be
        extended to support the args of this utility.

    @returns: ArgumentParser with proper argument configuration.
    """
    if not parser:
        parser = argparse.ArgumentParser(
            prog=NAME,
            description=(
                "Quickly set the IPv4 address, netmask, gateway and DNS"
                " server of a network interface."
            ),
            epilog=intent.USAGE,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version="%(prog)s " + (version.version_string()),
        help="Show program's version number and exit.",
    )
    parser.add_argument(
        "--debug",
        "-d",
        action="store_true",
        default=False,
        help="Show debug logging (default: %(default)s).",
    )
    parser.add_argument(
        "--interface",
        "-i",
        type=str,
        default=None,
        help="Interface to configure. Prompt for one when not given.",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help=(
            "Path to a yaml config file. Default is"
            f" ${settings.CFG_ENV_NAME} or {settings.SETIP_CONFIG}"
        ),
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for the new address to appear.",
    )
    parser.add_argument(
        "--no-install",
        dest="install",
        action="store_false",
        default=True,
        help="Do not install missing commands, fail instead.",
    )
    parser.add_argument(
        "params",
        nargs="*",
        metavar="ARG",
        help="IP [MASK [GATEWAY [DNS]]] or DNS <server>",
    )
    return parser


def select_interface(
    interfaces: List[str],
    requested: Optional[str] = None,
    input_fn: Callable[[str], str] = input,
    out=None,
) -> str:
    """Return the interface to configure.

    A requested name must be one of interfaces. Without one, interfaces
    are listed on out and the user is asked for a number until a valid
    one is entered.
    """
    out = out or sys.stdout
    if not interfaces:
        raise SetipError("No configurable network interface found.")
    if requested:
        if requested not in interfaces:
            raise InvalidArgument(
                "Unknown interface %s, choose one of: %s"
                % (requested, ", ".join(interfaces))
            )
        return requested
    out.write(netinfo.netdev_pformat(interfaces) + "\n")
    while True:
        try:
            choice = input_fn("Select the number of the interface: ")
        except EOFError as e:
            raise InvalidArgument("No interface selected.") from e
        choice = choice.strip()
        if choice.isdigit() and 1 <= int(choice) <= len(interfaces):
            return interfaces[int(choice) - 1]
        out.write("Invalid input, enter a number from the list.\n")


def _ensure_commands(cfg, os_info, commands, install: bool):
    if not (install and cfg.get("ensure_commands", True)):
        return
    for cmd, pkg in commands:
        distro.ensure_command(cmd, pkg, os_info)


def probe(args, cfg, input_fn=input) -> RunContext:
    """Detect os, backend and interface for this run."""
    os_info = distro.detect_os(util.get_cfg_by_path(cfg, "paths/os_release"))
    _ensure_commands(cfg, os_info, settings.REQUIRED_COMMANDS, args.install)
    kind = backends.detect_backend(os_info.id, cfg)
    print(
        "[INFO] Detected system: %s %s.%s, network management: %s"
        % (
            os_info.id,
            os_info.version_major,
            os_info.version_minor,
            kind.value,
        )
    )
    try:
        interfaces = netinfo.list_interfaces()
    except subp.ProcessExecutionError as e:
        raise SetipError("Unable to list network interfaces: %s" % e) from e
    iface = select_interface(interfaces, args.interface, input_fn=input_fn)
    print("[INFO] Using interface: %s" % iface)
    return RunContext(cfg=cfg, os_info=os_info, backend=kind, interface=iface)


def handle_args(name, args, input_fn=input):
    """Handle calls to the 'setip' cli.

    @return: 0 on success, 1 on error.
    """
    try:
        cfg = config.read_config(args.config)
        level = (
            logging.DEBUG
            if args.debug
            else log.level_from_name(cfg.get("log_level"))
        )
        log.setup_basic_logging(level)

        if not util.is_root():
            raise SetipError("Please run %s as root (sudo or root)." % name)
        # Validate the arguments before anything looks at the system
        mode, params = intent.parse_params(args.params)
        ctx = probe(args, cfg, input_fn=input_fn)

        backend = backends.get_backend(ctx.backend, cfg)
        if backend.required_command:
            _ensure_commands(
                cfg, ctx.os_info, [backend.required_command], args.install
            )
        resolv_conf = util.get_cfg_by_path(cfg, "paths/resolv_conf")
        current = netinfo.current_state(ctx.interface, resolv_conf)
        target = intent.resolve_intent(mode, params, ctx.interface, current)

        prefix = backend.apply(target, mode)
        backend.verify(target, prefix, timeout=args.timeout)
        verify.report(ctx.interface, resolv_conf)
    except SetipError as e:
        LOG.debug("setip failed", exc_info=True)
        return util.error(str(e), fmt="ERROR: {}")
    print("Configuration complete!")
    return 0


def main(sysv_args=None):
    """Tool to set the IPv4 configuration of one network interface."""
    log.configure_root_logger()
    parser = get_parser()
    try:
        args = parser.parse_args(sysv_args)
    except SystemExit as e:
        # argparse uses 2 for usage errors, setip only knows 0 and 1
        sys.exit(1 if e.code else 0)
    rc = handle_args(NAME, args, input_fn=input)
    log.flush_loggers(logging.getLogger())
    sys.exit(rc)


if __name__ == "__main__":
    main()
