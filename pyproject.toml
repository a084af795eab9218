[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "pipechain"
version = "0.1.0"
description = "Run a chain of commands between an input file and an output file, shell-pipeline style"
requires-python = ">=3.10"
dependencies = []
keywords = ["pipeline", "pipe", "here-doc", "shell", "process", "command-line"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Shells",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
pipechain = "pipechain.pipeline:main"
pipechain-pair = "pipechain.pipeline:main_pair"

[tool.setuptools.packages.find]
include = ["pipechain*"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
