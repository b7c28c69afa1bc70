[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pkganalysis"
version = "0.1.0"
description = "Building blocks for package analysis: ecosystems, analysis run records, strace log parsing and small file helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["security", "supply-chain", "strace", "malware-analysis", "packages"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pkganalysis"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
