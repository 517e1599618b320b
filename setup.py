"""Setup configuration for hfchat."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="hfchat",
    version="0.1.0",
    description="Terminal chat client with markdown and syntax-highlighted code rendering",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["hfchat", "hfchat.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Terminals",
    ],
    python_requires=">=3.9",
    install_requires=[
        "click>=8.0",
        "rich>=13.0",
        "pyyaml>=6.0",
        "httpx>=0.24.0",
        "pygments>=2.14.0",
        "markdown-it-py>=3.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "hfchat=hfchat.cli:main",
        ],
    },
)
