from setuptools import setup, find_packages
from delegator_stats._version import __version__

setup(
    name="delegator-stats",
    version=__version__,
    description="Voting power delegated to one address across Realms governance communities, read by simulating voter-stake-registry instructions.",
    author="VotaFi",
    license="MIT license",
    python_requires=">=3.9",
    packages=find_packages(include=["delegator_stats", "delegator_stats.*"]),
    install_requires=[
        "solders>=0.21",
        "httpx>=0.25",
        "borsh-construct>=0.1.0",
        "construct>=2.10",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
        "argh>=0.29",
    ],
    extras_require={
        "test": ["pytest>=7", "pytest-asyncio>=0.21"],
    },
    entry_points={
        "console_scripts": ["delegator-stats=delegator_stats.cli:main"],
    },
)
