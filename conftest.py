"""Shared pytest setup for tests/unittests.

Everything imported here must be listed in test-requirements.txt.

setip exists to reconfigure the network of the host it runs on, so no test
may reach a real command by accident. ``block_subp`` replaces
``setip.subp.subp`` for every test; tests either patch it themselves,
inject a fake runner into a backend, or opt in with a mark:

    @pytest.mark.allow_subp_for("bash")      # only these commands
    @pytest.mark.allow_all_subp              # anything at all
"""
from unittest import mock

import pytest

from setip import subp


class UnexpectedSubpError(BaseException):
    """Raised for a command a test did not allow.

    A BaseException so that the ``except Exception`` and
    ``except ProcessExecutionError`` clauses under test cannot hide it.
    """


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "allow_subp_for(*cmds): let these commands really run"
    )
    config.addinivalue_line(
        "markers", "allow_all_subp: let any command really run"
    )


def _mark_args(request, name):
    """Return the args of the closest mark called name, or None."""
    marker = request.node.get_closest_marker(name)
    return None if marker is None else marker.args


def _subp_guard(allowed, real_subp):
    def guard(args, *other_args, **kwargs):
        if allowed is None or args[0] not in allowed:
            raise UnexpectedSubpError(
                "Unexpectedly used subp.subp to run %s (allowed: %s)"
                % (args, ", ".join(allowed or ()) or "nothing")
            )
        return real_subp(args, *other_args, **kwargs)

    return guard


@pytest.fixture(autouse=True)
def block_subp(request):
    """Make ``setip.subp.subp`` fail unless the test allows the command."""
    allowed = _mark_args(request, "allow_subp_for")
    allow_all = _mark_args(request, "allow_all_subp")
    if allow_all is not None and allowed is not None:
        pytest.fail("Use either allow_all_subp or allow_subp_for, not both")
    if allow_all is not None:
        yield
        return
    guard = _subp_guard(allowed, subp.subp)
    with mock.patch("setip.subp.subp", autospec=True, side_effect=guard):
        yield
