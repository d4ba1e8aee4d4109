import os
import re
from typing import List

TOP_DIR = os.path.dirname(os.path.realpath(__file__))


def is_f(p: str) -> bool:
    return os.path.isfile(p)


def version_to_pep440(version: str) -> str:
    # git describe can spit out something like 1.0.0-15-g7f97aee24
    # which is invalid under PEP 440. If we replace the first - with a +
    # that should give us a valid version.
    return version.replace("-", "+", 1)


def get_version() -> str:
    with open(os.path.join(TOP_DIR, "setip", "version.py")) as fh:
        match = re.search(r'^__VERSION__ = "([^"]+)"', fh.read(), re.M)
    if not match:
        raise RuntimeError("Unable to find __VERSION__ in setip/version.py")
    return version_to_pep440(match.group(1))


def read_requires(fname: str = "requirements.txt") -> List[str]:
    path = os.path.join(TOP_DIR, fname)
    if not is_f(path):
        return []
    deps = []
    with open(path) as fh:
        for line in fh:
            line = line.split("#", 1)[0].strip()
            if line:
                deps.append(line)
    return deps
