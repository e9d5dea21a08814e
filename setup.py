#!/usr/bin/env python3
"""
Setup script for SMB Trigger
Allows installation via pip
"""

from pathlib import Path

from setuptools import find_packages, setup

# Read README
this_directory = Path(__file__).parent
long_description = (
    (this_directory / "README.md").read_text(encoding="utf-8")
    if (this_directory / "README.md").exists()
    else ""
)

setup(
    name="smb-trigger",
    version="1.0.0",
    author="SMB Trigger Contributors",
    author_email="",
    description="Turn SMB2 change notifications into stable, de-duplicated file events",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["smb_trigger", "smb_trigger.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: System Administrators",
        "Topic :: System :: Filesystems",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS",
        "Operating System :: Microsoft :: Windows",
    ],
    python_requires=">=3.9",
    entry_points={
        "console_scripts": [
            "smb-trigger=smb_trigger.cli.app:main",
        ],
    },
    install_requires=[
        "rich>=13.0.0",
        "watchdog>=3.0.0",
        "tenacity>=8.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "pytest-xdist>=3.0",
            "hypothesis>=6.0",
            "faker>=18.0",
        ],
    },
    keywords="smb, samba, cifs, watch, trigger, change notification",
)
