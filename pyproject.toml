[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tcpcat"
version = "1.0.0"
description = "A netcat-like TCP tool: listen for or open a connection and pipe it to the terminal or a shell"
requires-python = ">=3.10"
dependencies = []
keywords = ["netcat", "tcp", "networking", "listener", "shell", "pty"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tcpcat = "tcpcat.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["tcpcat"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
