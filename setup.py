from setuptools import setup, find_packages

setup(
    name="pi-network-sdk",
    version="0.1.0",
    description="Python SDK core for the Pi Network payment API",
    author="Pi SDK Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "httpx>=0.25.1",
        "pydantic>=2.5.0",
        "structlog>=23.2.0",
        "tenacity>=8.2.3",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    python_requires=">=3.10",
)
