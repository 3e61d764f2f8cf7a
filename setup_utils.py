import os
import re
from typing import List

TOPDIR = os.path.dirname(os.path.realpath(__file__))


def is_f(p: str) -> bool:
    return os.path.isfile(p)


def get_version() -> str:
    version_file = os.path.join(TOPDIR, "netconverge", "version.py")
    with open(version_file, encoding="utf-8") as stream:
        match = re.search(
            r'^__VERSION__ = "(?P<version>[^"]+)"', stream.read(), re.M
        )
    if not match:
        raise RuntimeError("No __VERSION__ found in %s" % version_file)
    return match.group("version")


def read_requires(fname: str = "requirements.txt") -> List[str]:
    """Requirement lines of fname without comments or blank lines."""
    deps = []
    with open(os.path.join(TOPDIR, fname), encoding="utf-8") as stream:
        for line in stream:
            line = line.split("#", 1)[0].strip()
            if line:
                deps.append(line)
    return deps
