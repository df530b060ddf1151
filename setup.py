from setuptools import setup, find_packages

setup(
    name="passthenote-e2e",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "mcp>=1.0.0,<2",
        "playwright>=1.40.0",
        "pydantic>=2.0.0"
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.23"
        ]
    },
    entry_points={
        "console_scripts": [
            "passthenote-e2e=passthenote_e2e.cli:main",
            "passthenote-mcp=passthenote_e2e.server:main"
        ]
    },
    python_requires=">=3.10",
)
