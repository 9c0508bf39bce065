[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lendingdesk"
version = "0.1.0"
description = "Building blocks for a peer-to-peer lending back office: loan lifecycle and investment rules, SQLAlchemy repositories, an event bus, templated e-mail and Flask request guards."
requires-python = ">=3.10"
keywords = ["lending", "loans", "investment", "p2p", "sqlalchemy", "flask"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
]
dependencies = [
    "flask>=2.3",
    "sqlalchemy>=2.0",
    "jinja2>=3.1",
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
]

[tool.hatch.build.targets.wheel]
packages = ["lendingdesk"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
