from setuptools import setup, find_packages

setup(
    name="dicecast",
    version="0.1.0",
    description="Physically simulated polyhedral dice with notation parsing and face-reading roll resolution",
    author="Samuel",
    python_requires=">=3.11",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "flask>=3.0.0",
        "jsonschema>=4.20.0",
        "colorama>=0.4.6",
        "python-dotenv>=1.0.0",
        "numpy>=1.26.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "black>=23.12.0",
            "mypy>=1.7.0",
            "pylint>=3.0.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "dicecast=dicecast.cli.commands:main",
        ]
    },
)
