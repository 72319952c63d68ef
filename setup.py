"""Setup configuration for the modconsole moderation console core."""

from setuptools import setup, find_packages

setup(
    name="modconsole",
    version="0.0.1",
    description="Threading, statistics, analytics and group reconciliation for a community moderation console",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "aiosqlite",
        "PyYAML",
        "prompt_toolkit",
        "requests",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
)
