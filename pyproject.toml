[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "picframe"
version = "0.1.0"
description = "Digital picture frame building blocks: BMP/JPEG decoding, scaling, touch-driven menu pages, a directory browser and a UDP debug client"
requires-python = ">=3.10"
dependencies = [
    "pillow",
]
keywords = ["picture frame", "bmp", "jpeg", "image viewer", "touchscreen", "udp"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: Viewers",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
picframe-client = "picframe.udp_client:main"

[tool.hatch.build.targets.wheel]
packages = ["picframe"]

[tool.pytest.ini_options]
addopts = "-ra"
