#!/usr/bin/env python
import setuptools
from setuptools import setup

with open("README.md", "r") as fh:
    long_description = fh.read()

with open("./strgraph/VERSION", "r") as vf:
    version = vf.read().strip()

setup(
    name="strgraph",
    version=version,

    python_requires="~=3.10",
    install_requires=[
        "numpy>=1.23.4,<3",
        "orjson>=3.9.15,<4",
        "pydantic>=2.0,<3",
        "scipy>=1.10,<2",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },

    description="Genotyping of short tandem repeats from short-read alignments to locus sequence graphs.",
    long_description=long_description,
    long_description_content_type="text/markdown",

    license="GPLv3",
    classifiers=[
        "Programming Language :: Python :: 3 :: Only",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Operating System :: POSIX",
    ],

    packages=setuptools.find_packages(include=["strgraph", "strgraph.*"]),
    package_data={"strgraph": ["VERSION"]},
    include_package_data=True,
)
