"""Setup configuration for health-sync."""

from setuptools import setup, find_packages

setup(
    name="health-sync",
    version="0.1.0",
    description="Merge health-store and scale vendor data and upload it",
    packages=find_packages(exclude=["tests"]),
    python_requires=">=3.11",
    install_requires=[
        "httpx>=0.27.0",
        "pydantic>=2.5.0",
        "python-dateutil>=2.8.0",
        "scale-connector",
        "health-normalize",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.23.0",
            "pytest-cov>=4.0.0",
        ],
    },
    license="MIT",
)
