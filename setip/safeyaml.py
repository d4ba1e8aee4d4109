# This file is part of setip. See LICENSE file for license information.
"""YAML output for files setip writes."""

import yaml


class NoAliasSafeDumper(yaml.dumper.SafeDumper):
    """SafeDumper that writes repeated objects out in full.

    netplan files are read by humans; '&id001' anchors would only confuse.
    """

    def ignore_aliases(self, data):
        return True


def dumps(obj, header=None, explicit_start=False) -> str:
    """Return obj as block style yaml, keeping dict insertion order.

    header, when given, is emitted first and always ends with a newline.
    """
    content = yaml.dump(
        obj,
        Dumper=NoAliasSafeDumper,
        default_flow_style=False,
        explicit_start=explicit_start,
        indent=2,
        line_break="\n",
        sort_keys=False,
    )
    if not header:
        return content
    if not header.endswith("\n"):
        header += "\n"
    return header + content
