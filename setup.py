# This file is part of netconverge. See LICENSE file for license information.

# Setuptools magic for netconverge

import os
import sys
from glob import glob

import setuptools

# Python-path here is a little unpredictable as setup.py could be run
# from a directory other than the root of the repo, so ensure we can find
# our utils
sys.path.insert(0, os.path.dirname(os.path.realpath(__file__)))
# isort: off
from setup_utils import get_version, is_f, read_requires  # noqa: E402

# isort: on
del sys.path[0]

data_files = [
    ("/etc/netconverge", [f for f in glob("config/*.cfg") if is_f(f)]),
]

requirements = read_requires()

setuptools.setup(
    name="netconverge",
    version=get_version(),
    description="Converge host networking to declared networks",
    packages=setuptools.find_packages(exclude=["tests.*", "tests"]),
    license="Dual-licensed under GPLv3 or Apache 2.0",
    python_requires=">=3.8",
    data_files=data_files,
    install_requires=requirements,
    extras_require={
        "test": read_requires("test-requirements.txt"),
    },
    entry_points={
        "console_scripts": [
            "netconverge = netconverge.cmd.main:main",
        ],
    },
)
