[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ambulance-api"
version = "1.0.0"
description = "HTTP service for managing ambulances and their patient questionnaires, backed by MongoDB"
requires-python = ">=3.10"
keywords = ["ambulance", "questionnaire", "rest", "flask", "mongodb"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Framework :: Flask",
    "Intended Audience :: Healthcare Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "flask",
    "pymongo",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
ambulance-api-service = "ambulance_api.server:main"

[tool.hatch.build.targets.wheel]
packages = ["ambulance_api"]

[tool.pytest.ini_options]
addopts = "-ra"
