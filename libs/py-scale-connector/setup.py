"""Setup configuration for scale-connector."""

from setuptools import setup, find_packages

setup(
    name="scale-connector",
    version="0.1.0",
    description="Renpho body-composition cloud client with two-stage sign-in",
    packages=find_packages(exclude=["tests"]),
    python_requires=">=3.11",
    install_requires=[
        "httpx>=0.27.0",
        "pydantic>=2.0.0",
        "cryptography>=42.0.0",
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
