[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "userapi"
version = "0.1.0"
description = "A small WSGI service for creating, reading, updating and deleting users stored in PostgreSQL"
requires-python = ">=3.10"
keywords = ["users", "rest", "wsgi", "postgresql", "crud"]
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
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
    "Topic :: Database :: Front-Ends",
]
dependencies = [
    "python-dotenv",
    "sqlalchemy",
    "werkzeug",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
userapi = "userapi.app:main"

[tool.hatch.build.targets.wheel]
packages = ["userapi"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
