[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fleecekit"
version = "0.1.0"
description = "Differential testing toolkit for instruction decoders: field parsing, bit mapping, reassembly checks and report filtering"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "disassembler",
    "decoder",
    "differential-testing",
    "fuzzing",
    "assembler",
    "instruction-set",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Testing",
    "Topic :: Software Development :: Disassemblers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["fleecekit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
