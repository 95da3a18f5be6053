"""Setup script for dhis2-godata-case-copy following Cosmic Python pattern."""

from setuptools import setup, find_namespace_packages

setup(
    name="dhis2-godata-case-copy",
    version="1.0.0",
    description="One-shot copy of DHIS2 tracked entity cases into Go.Data outbreaks",
    author="Case Copy Team",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["case_copy*"]),
    py_modules=["config"],
    python_requires=">=3.11",
    install_requires=[
        "httpx",
        "pydantic>=2",
    ],
    extras_require={
        "test": [
            "pytest>=7",
            "pytest-asyncio",
            "pytest-cov",
        ],
        "dev": [
            "black",
            "flake8",
            "mypy",
            "pre-commit",
        ],
    },
    entry_points={
        "console_scripts": [
            "case-copy=case_copy.entrypoints.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Healthcare Industry",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering :: Medical Science Apps.",
    ],
)
