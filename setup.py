#!/usr/bin/env python3
"""
postlang Programming Language
A tiny expression language compiled incrementally to native code with LLVM.
"""

from setuptools import setup, find_packages
import os
import sys

# Ensure Python 3.10+ (oldest interpreter llvmlite 0.44 supports)
if sys.version_info < (3, 10):
    raise RuntimeError("postlang requires Python 3.10 or later")

# Read version from __init__.py without importing the package
here = os.path.abspath(os.path.dirname(__file__))
version_file = os.path.join(here, "postlang", "__init__.py")
version = {"__version__": "0.1.0"}
with open(version_file, encoding="utf-8") as f:
    for line in f:
        if line.startswith("__version__"):
            version["__version__"] = line.split("=", 1)[1].strip().strip('"\'')
            break

# Read README
readme_file = os.path.join(here, "README.md")
with open(readme_file, "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="postlang",
    version=version["__version__"],
    description="An expression-oriented language with an incremental LLVM JIT",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="xwest",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "llvmlite>=0.44.0",
        "click>=8.2.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "postlang=postlang.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 2 - Pre-Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Compilers",
        "Topic :: Software Development :: Interpreters",
    ],
    keywords=["programming-language", "compiler", "jit", "llvm", "repl"],
    zip_safe=False,
)
