[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "memreel"
version = "0.1.0"
description = "Chunk text into QR payloads, store image frames as a frame-sequence video, and find relationships between concepts."
requires-python = ">=3.10"
dependencies = [
    "pillow",
]
keywords = ["memory", "qr", "text", "chunking", "knowledge-graph", "frames"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: General",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["memreel"]

[tool.pytest.ini_options]
addopts = "-ra"
