[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "topicreg"
version = "0.1.0"
description = "In-memory registration server for themed chat topics, with UDP notices to topic partners"
requires-python = ">=3.10"
dependencies = []
keywords = ["chat", "registration", "topics", "themes", "tcp", "udp", "server", "asyncio"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
topicreg-server = "topicreg.server:main"

[tool.hatch.build.targets.wheel]
packages = ["topicreg"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
