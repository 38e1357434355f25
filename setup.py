"""Setup script for the aqdash package."""

from setuptools import find_packages, setup

setup(
    name="aqdash",
    version="0.1.0",
    description="Live and historical air quality dashboard for ThingSpeak channels",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pyyaml",
        "python-dotenv",
        "aiohttp",
        "rich",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-asyncio",
            "black",
            "isort",
            "mypy",
        ],
    },
    entry_points={
        "console_scripts": [
            "aqdash=aqdash.dashboard:main",
        ],
    },
)
