# This file is part of setip. See LICENSE file for license information.
"""Errors raised by setip.

Every failure is terminal for a run: the command line entry point reports
the message and exits with status 1.
"""


class SetipError(Exception):
    pass


class UnsupportedPlatform(SetipError):
    pass


class NoBackendDetected(SetipError):
    pass


class InvalidArgument(SetipError, ValueError):
    pass


class InvalidMask(InvalidArgument):
    pass


class MissingPrefix(SetipError):
    pass


class ApplyError(SetipError):
    pass


class VerificationFailed(SetipError):
    pass


class ConfigError(SetipError):
    pass
