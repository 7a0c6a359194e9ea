[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rtcutil"
version = "0.1.0"
description = "Asyncio networking utilities for real-time communication stacks: packet buffers, in-memory connections, UDP listeners and interface discovery"
requires-python = ">=3.10"
keywords = ["webrtc", "udp", "packet buffer", "asyncio", "network interfaces", "bridge"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Framework :: AsyncIO",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: System :: Networking",
]
dependencies = [
    "psutil",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
rtcutil-ifaces = "rtcutil.ifaces:main"

[tool.hatch.build.targets.wheel]
packages = ["rtcutil"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
