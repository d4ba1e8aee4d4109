# This file is part of setip. See LICENSE file for license information.
"""Load the optional setip configuration file.

The file is yaml, validated against SCHEMA and merged over
settings.CFG_BUILTIN so callers always see a complete configuration.
"""

import logging
import os
from typing import Optional

from jsonschema import Draft4Validator

from setip import settings, util
from setip.exceptions import ConfigError

LOG = logging.getLogger(__name__)

SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "paths": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "os_release": {"type": "string"},
                "resolv_conf": {"type": "string"},
                "netplan_dir": {"type": "string"},
                "network_scripts_dir": {"type": "string"},
            },
        },
        "verify": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "timeout": {"type": "number", "minimum": 0},
                "interval": {
                    "type": "number",
                    "minimum": 0,
                    "exclusiveMinimum": True,
                },
            },
        },
        "netplan": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "gateway_style": {"enum": ["gateway4", "routes"]},
            },
        },
        "ensure_commands": {"type": "boolean"},
        "log_level": {
            "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        },
    },
}


def validate_config(cfg: dict):
    """Raise ConfigError describing every schema violation in cfg."""
    validator = Draft4Validator(SCHEMA)
    errors = sorted(validator.iter_errors(cfg), key=lambda e: list(e.path))
    if errors:
        problems = []
        for err in errors:
            path = ".".join(str(p) for p in err.path) or "<root>"
            problems.append("%s: %s" % (path, err.message))
        raise ConfigError("Invalid configuration: " + "; ".join(problems))


def _has_content(blob: str) -> bool:
    """True when blob holds more than blank lines and comments."""
    for line in blob.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            return True
    return False


def read_config(fname: Optional[str] = None) -> dict:
    """Return the builtin config merged with the config file, if any.

    The file is looked up from fname, then the SETIP_CFG environment
    variable, then settings.SETIP_CONFIG. A missing default file is not an
    error, a missing explicitly requested file is.
    """
    explicit = fname or os.environ.get(settings.CFG_ENV_NAME)
    path = explicit or settings.SETIP_CONFIG
    try:
        blob = util.load_text_file(path)
    except FileNotFoundError as e:
        if explicit:
            raise ConfigError("Config file not found: %s" % path) from e
        LOG.debug("No config file at %s, using builtin defaults", path)
        return util.mergemanydict([settings.CFG_BUILTIN])
    except OSError as e:
        raise ConfigError("Unable to read %s: %s" % (path, e)) from e

    file_cfg = util.load_yaml(blob, default=None)
    if file_cfg is None:
        if _has_content(blob):
            raise ConfigError("Config file %s is not a yaml mapping" % path)
        file_cfg = {}
    validate_config(file_cfg)
    LOG.debug("Loaded config from %s", path)
    return util.mergemanydict([file_cfg, settings.CFG_BUILTIN])
