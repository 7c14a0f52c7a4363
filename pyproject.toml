[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "shelfkeep"
version = "0.1.0"
description = "Media tracking library: catalog books and audio books in SQLite, record progress and reviews, and read history from Goodreads feeds and MediaTracker servers."
requires-python = ">=3.10"
keywords = ["media", "tracker", "books", "audiobooks", "goodreads", "openlibrary", "audible", "import"]
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
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
]
dependencies = [
    "httpx",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["shelfkeep"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]
