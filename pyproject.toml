[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "supermarket"
version = "0.1.0"
description = "A small supermarket web application with server-rendered pages, database models and schema migrations."
requires-python = ">=3.10"
keywords = ["web", "flask", "sqlalchemy", "migrations", "tailwind"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: Flask",
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
    "sqlalchemy>=2.0",
    "flask>=2.3",
    "markupsafe>=2.1",
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
supermarket-server = "supermarket.server:main"
supermarket-migrate = "supermarket.migration:main"
supermarket-icons = "supermarket.icons:main"

[tool.hatch.build.targets.wheel]
packages = ["supermarket"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
