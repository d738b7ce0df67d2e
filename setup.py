"""Setup configuration for the OX pubsub engine."""

from setuptools import setup, find_packages

setup(
    name="ox-pubsub",
    version="0.1.0",
    description="XMPP publish-subscribe engine for OX service modules",
    author="OX Team",
    author_email="ox@example.com",
    license="MIT",
    packages=find_packages(include=["ox_pubsub", "ox_pubsub.*"]),
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        "ulid-py>=1.1.0",
        "PyYAML>=6.0",
        "prometheus-client>=0.19.0",
        "opentelemetry-api>=1.22.0",
        "click>=8.1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "pytest-mock>=3.12.0",
            "black>=23.12.0",
            "ruff>=0.1.0",
            "mypy>=1.8.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "ox-pubsub=ox_pubsub.cli:main",
        ],
    },
)
