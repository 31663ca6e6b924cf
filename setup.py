"""
Setup configuration for the md-directives package.

This script uses setuptools to package and distribute the md-directives
library. It also reads the requirements and long description directly
from external files for ease of maintenance.
"""
from setuptools import find_packages, setup

VERSION = "0.1.0"


def read_requirements():
    """
    Read requirements from requirements.txt file.
    """
    with open("requirements.txt", encoding="UTF-8") as file:
        return [line.strip() for line in file if line.strip() and not line.startswith("#")]


def get_long_description():
    """
    Read README.md file.
    """
    with open("README.md", encoding="utf8") as file:
        return file.read()


setup(
    name="md-directives",
    description="Expand table of contents, caption, include, and section directives in Markdown files.",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    version=VERSION,
    packages=find_packages(include=["md_directives", "md_directives.*"]),
    install_requires=read_requirements(),
    extras_require={
        "test": ["pytest", "hypothesis"],
    },
    entry_points={
        "console_scripts": [
            "md-directives=md_directives.cli:cli",
        ]
    },
    python_requires=">=3.11",
)
