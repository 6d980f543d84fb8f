[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "minnow"
version = "0.1.0"
description = "Byte streams, a stream reassembler, and small socket tools for building a TCP stack"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "networking",
    "tcp",
    "byte-stream",
    "reassembler",
    "sockets",
    "event-loop",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: Internet",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
minnow-tcp = "minnow.tcp_native:main"
minnow-webget = "minnow.webget:main"
minnow-ip-raw = "minnow.ip_raw:main"

[tool.hatch.build.targets.wheel]
packages = ["minnow"]

[tool.pytest.ini_options]
addopts = "-ra"
