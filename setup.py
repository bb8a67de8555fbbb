"""
HLSRelay — setuptools build script.

Usage:
    # Development (editable install):
    pip install -e .

    # Run the test suite:
    python -m unittest discover -s tests
"""

from setuptools import setup, find_namespace_packages

APP_NAME = "hlsrelay"

setup(
    name=APP_NAME,
    version="1.0.0",
    description="Download source videos and publish them as multi-rendition HLS",
    packages=find_namespace_packages(include=["hlsrelay", "hlsrelay.*"]),
    py_modules=["main"],
    install_requires=[
        "requests>=2.28.0",
        "urllib3>=2.3",
    ],
    python_requires=">=3.10",
    entry_points={
        "console_scripts": [
            "hlsrelay = main:main",
        ],
    },
)
