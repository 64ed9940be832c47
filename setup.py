import codecs
import pathlib

from setuptools import find_packages, setup

PROJECT_NAME = "pathgate"
PROJECT_ROOT = pathlib.Path(__file__).parent
VERSION = "0.1.0"
DESCRIPTION = "an asgi edge gateway with prefix routing and per-client rate limiting"


with codecs.open(str(PROJECT_ROOT / "README.md"), encoding="utf-8") as fh:
    long_description = "\n" + fh.read()

setup(
    name=PROJECT_NAME,
    version=VERSION,
    packages=find_packages(exclude=["tests", "*.tests", "*.tests.*", "tests.*"]),
    install_requires=[
        "aiohttp>=3.9",
        "pyyaml>=6.0",
        "redis>=5.0.3",
        "uvicorn>=0.27",
        "yarl>=1.9",
    ],
    extras_require={"test": ["pytest>=8.0", "pytest-asyncio>=0.23"]},
    entry_points={"console_scripts": [f"{PROJECT_NAME}={PROJECT_NAME}.main:run"]},
    description=DESCRIPTION,
    long_description_content_type="text/markdown",
    long_description=long_description,
    author="race",
    author_email="raceychan@gmail.com",
    license="MIT",
    python_requires=">=3.10",
    classifiers=[
        # Trove classifiers
        # Full list: https://pypi.python.org/pypi?%3Aaction=list_classifiers
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: Implementation :: CPython",
    ],
)
