[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hajserv"
version = "1.0.0"
description = "A small non-blocking HTTP/1.x static file server driven by a block-structured configuration file"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "server", "static", "webserver", "selectors"]
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
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
hajserv = "hajserv.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["hajserv"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
