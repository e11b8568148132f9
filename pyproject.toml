[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "katana"
version = "0.1.0"
description = "Crawler building blocks: scope rules, URL filters, crawl queues, endpoint and form extraction, and result output."
requires-python = ">=3.10"
keywords = ["crawler", "spider", "web", "scope", "urls", "forms", "output"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Information Technology",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Indexing/Search",
]
dependencies = [
    "beautifulsoup4",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["katana"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
