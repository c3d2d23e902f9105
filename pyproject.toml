[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "htmltemple"
version = "0.1.0"
description = "Runtime values, operators, value access and HTML error rendering for a small HTML template language"
requires-python = ">=3.10"
dependencies = []
keywords = ["html", "template", "templating", "runtime", "markup"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Text Processing :: Markup :: HTML",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["htmltemple"]

[tool.pytest.ini_options]
addopts = "-ra"
