[build-system]
requires = ["setuptools>=61.0"]
build-backend = "setuptools.build_meta"

[project]
name = "minish"
version = "0.1.0"
description = "A small interactive shell with pipes, redirections, here-documents and variable expansion"
requires-python = ">=3.10"
dependencies = []
keywords = ["shell", "command-line", "interpreter", "pipes", "heredoc"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Shells",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
minish = "minish.shell:main"

[tool.setuptools]
packages = ["minish"]

[tool.pytest.ini_options]
addopts = "-ra"
