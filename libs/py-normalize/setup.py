"""Setup configuration for health-normalize."""

from setuptools import setup, find_packages

setup(
    name="health-normalize",
    version="0.1.0",
    description="Payload schema and normalization for health-store records",
    packages=find_packages(exclude=["tests"]),
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.5.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    license="MIT",
)
