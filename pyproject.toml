[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wikiprep"
version = "0.1.0"
description = "Reversible preprocessing of Wikipedia XML dumps ahead of context-mixing compression"
requires-python = ">=3.10"
dependencies = []
keywords = ["compression", "preprocessing", "wikipedia", "enwik9", "xml"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Archiving :: Compression",
    "Topic :: Text Processing :: Markup :: XML",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
wikiprep-remap = "wikiprep.remap:main"

[tool.hatch.build.targets.wheel]
packages = ["wikiprep"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
