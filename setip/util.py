# This file is part of setip. See LICENSE file for license information.

import copy as obj_copy
import glob
import logging
import os
import shlex
import shutil
import sys
import time
from typing import Callable, List, Mapping, Optional, Sequence, Union

import yaml

LOG = logging.getLogger(__name__)


def decode_binary(blob: Union[str, bytes], encoding="utf-8") -> str:
    return blob if isinstance(blob, str) else blob.decode(encoding)


def encode_text(text: Union[str, bytes], encoding="utf-8") -> bytes:
    return text if isinstance(text, bytes) else text.encode(encoding)


def load_text_file(fname, *, quiet: bool = False) -> str:
    """Return the decoded content of fname.

    With quiet, a missing file reads as an empty string.
    """
    try:
        with open(fname, "rb") as fh:
            contents = fh.read()
    except FileNotFoundError:
        if not quiet:
            raise
        LOG.debug("%s does not exist, treating it as empty", fname)
        return ""
    LOG.debug("Read %s bytes from %s", len(contents), fname)
    return decode_binary(contents)


def load_shell_content(content: str) -> dict:
    r"""Parse KEY=value lines, as found in os-release, into a dict.

    Quoting follows shell rules, comments and empty values are dropped:
        'ID="centos"\nVERSION_ID=7\nEMPTY=' => {"ID": "centos",
                                                 "VERSION_ID": "7"}
    """
    data = {}
    for token in shlex.split(content, comments=True):
        key, sep, value = token.partition("=")
        if sep and value:
            data[key] = value
    return data


def load_yaml(blob, default=None, allowed=(dict,)):
    """Return the yaml document in blob, or default.

    default is also returned, with a warning, when blob is not valid yaml
    or its top level is not one of allowed.
    """
    try:
        loaded = yaml.safe_load(decode_binary(blob))
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        if mark:
            LOG.warning(
                "Failed loading yaml: invalid format at line %s column %s",
                mark.line + 1,
                mark.column + 1,
            )
        else:
            LOG.warning("Failed loading yaml: %s", e)
        return default
    if loaded is None:
        return default
    if not isinstance(loaded, allowed):
        LOG.warning(
            "Failed loading yaml: expected %s at the top level, got %s",
            " or ".join(t.__name__ for t in allowed),
            type(loaded).__name__,
        )
        return default
    return loaded


def mergemanydict(sources: Sequence[Mapping]) -> dict:
    """Deep merge sources into a new dict, earlier sources win.

    Nested dicts are merged key by key; any other value from an earlier
    source replaces the later one outright. The sources are not modified.
    """
    merged: dict = {}
    for cfg in sources:
        if cfg:
            merged = _merge_dict(merged, cfg)
    return merged


def _merge_dict(base: Mapping, extra: Mapping) -> dict:
    merged = obj_copy.deepcopy(dict(base))
    for key, value in extra.items():
        if key not in merged:
            merged[key] = obj_copy.deepcopy(value)
        elif isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _merge_dict(merged[key], value)
    return merged


def get_cfg_by_path(cfg, keyp, default=None):
    """Look up a nested config value.

    keyp is a '/' separated string or a sequence of keys:
        get_cfg_by_path({"verify": {"timeout": 5}}, "verify/timeout") == 5
    default is returned as soon as a key is missing.
    """
    if isinstance(keyp, str):
        keyp = keyp.split("/")
    cur = cfg
    for key in keyp:
        if not isinstance(cur, Mapping) or key not in cur:
            return default
        cur = cur[key]
    return cur


def ensure_dir(path, mode=None):
    if not os.path.isdir(path):
        os.makedirs(path)
    chmod(path, mode)


def safe_int(possible_int):
    try:
        return int(possible_int)
    except (ValueError, TypeError):
        return None


def chmod(path, mode):
    real_mode = safe_int(mode)
    if path and real_mode:
        os.chmod(path, real_mode)


def write_file(filename, content, mode=0o644, *, ensure_dir_exists=True):
    """Replace filename with content and set its mode.

    The parent directory is created first unless ensure_dir_exists is
    False.
    """
    if ensure_dir_exists:
        ensure_dir(os.path.dirname(filename))
    content = encode_text(content)
    LOG.debug("Writing %s bytes to %s [%o]", len(content), filename, mode)
    with open(filename, "wb") as fh:
        fh.write(content)
    chmod(filename, mode)


def copy(src, dest):
    LOG.debug("Copying %s to %s", src, dest)
    shutil.copy(src, dest)


def find_files(dirname, pattern) -> List[str]:
    """Return the sorted paths in dirname matching a glob pattern."""
    return sorted(glob.glob(os.path.join(dirname, pattern)))


def del_matching_lines(
    lines: List[str], prefixes: Sequence[str]
) -> List[str]:
    """Drop every line starting with one of prefixes, keeping the order."""
    return [line for line in lines if not line.startswith(tuple(prefixes))]


def logexc(log, msg, *args) -> None:
    """Log msg at WARNING, and again with the active traceback at DEBUG."""
    log.warning(msg, *args)
    log.debug(msg, *args, exc_info=True)


def wait_for(
    predicate: Callable[[], bool],
    maxwait: float,
    naplen: float = 0.5,
    log_pre="",
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Poll predicate until it returns True or maxwait seconds pass.

    The predicate is always evaluated at least once, and once more at the
    deadline. Returns the last result of predicate.
    """
    waited = 0.0
    while True:
        if predicate():
            LOG.debug("%sCondition met after %s seconds", log_pre, waited)
            return True
        if waited == 0:
            LOG.debug(
                "%sWaiting up to %s seconds for condition", log_pre, maxwait
            )
        if waited >= maxwait:
            break
        nap = min(naplen, maxwait - waited)
        sleep(nap)
        waited += nap

    LOG.debug("%sCondition still unmet after %s seconds", log_pre, maxwait)
    return False


def error(msg, rc=1, fmt="Error:\n{}", sys_exit=False):
    """Print msg to stderr using fmt, then return rc or exit with it."""
    print(fmt.format(msg), file=sys.stderr)
    if sys_exit:
        sys.exit(rc)
    return rc


def is_root(geteuid: Optional[Callable[[], int]] = None) -> bool:
    return (geteuid or os.geteuid)() == 0
