# This file is part of setip. See LICENSE file for license information.

import os

from setip import subp, util
from setip.distro import OSInfo
from tests.helpers import setip_project_dir

UBUNTU_2204 = OSInfo("ubuntu", 22, 4, "apt")
CENTOS_79 = OSInfo("centos", 7, 9, "yum")


def populate_dir(path, files):
    if not os.path.exists(path):
        os.makedirs(path)
    ret = []
    for (name, content) in files.items():
        p = os.path.sep.join([str(path), name])
        util.ensure_dir(os.path.dirname(p))
        with open(p, "wb") as fp:
            if isinstance(content, bytes):
                fp.write(content)
            else:
                fp.write(content.encode("utf-8"))
        ret.append(p)

    return ret


def resourceLocation(subname=None):
    path = setip_project_dir("tests/data")
    if not subname:
        return path
    return os.path.join(path, subname)


def readResource(name, mode="r"):
    with open(resourceLocation(name), mode) as fh:
        return fh.read()


class FakeRunner:
    """Stand-in for subp.subp recording every command it is given.

    responses maps a command prefix (tuple) to either a (stdout, stderr)
    tuple or an exception instance to raise. The longest matching prefix
    wins; unmatched commands return ("", "").
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def __call__(self, args, **kwargs):
        self.calls.append(list(args))
        match = None
        for prefix in self.responses:
            if tuple(args[: len(prefix)]) == prefix:
                if match is None or len(prefix) > len(match):
                    match = prefix
        if match is None:
            return subp.SubpResult("", "")
        response = self.responses[match]
        if isinstance(response, BaseException):
            raise response
        return subp.SubpResult(*response)
