[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vigilant-canine"
version = "0.1.0"
description = "Host-level intrusion detection building blocks: audit rule matching, baseline strategies and JSON API helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["ids", "intrusion-detection", "audit", "file-integrity", "security"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["vigilant_canine"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
