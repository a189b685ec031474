"""Setup script for hsync CLI tool."""

from setuptools import setup

setup(
    name="healthsync-bridge",
    version="0.1.0",
    description="HealthSync Bridge - health store and smart scale sync tool",
    py_modules=["hsync"],
    # Libraries live under libs/; install them alongside the CLI.
    packages=["scale_connector", "health_normalize", "health_sync"],
    package_dir={
        "scale_connector": "libs/py-scale-connector/scale_connector",
        "health_normalize": "libs/py-normalize/health_normalize",
        "health_sync": "libs/py-health-sync/health_sync",
    },
    install_requires=[
        "typer[all]>=0.9.0",
        "rich>=13.0.0",
        "httpx>=0.27.0",
        "python-dotenv>=1.0.0",
        # Dependencies from the libs/ packages
        "pydantic>=2.5.0",
        "cryptography>=42.0.0",
        "python-dateutil>=2.8.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.23.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "hsync=hsync:app",
        ],
    },
    python_requires=">=3.11",
)
