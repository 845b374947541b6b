from setuptools import setup, find_packages

setup(
    name="rerun-tools",
    version="1.0.0",
    description="Metadata-driven registry and launcher for module command scripts",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "rich>=13",
        "PyYAML>=6",
        "argcomplete>=3",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "rerun = rerun_core.__main__:main"
        ],
    },
)
