"""Setup configuration for shop-resources-api project."""

from setuptools import setup, find_packages

setup(
    name="shop-resources-api",
    version="1.0.0",
    description="FastAPI backend for per-user shipping addresses and cart items on MongoDB",
    author="Your Name",
    packages=find_packages(),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.109.0",
        "uvicorn>=0.27.0",
        "pymongo>=4.10",
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        "tzdata",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "httpx>=0.26",
            "mongomock-motor>=0.0.29",
        ],
    },
)
