#!/usr/bin/env python

from setuptools import setup, find_packages

setup(
    name="squad_log_tools",
    version="0.1.0",
    description="Python tools for folding Squad server logs into game and player statistics",
    author="GeNe FRAG",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    include_package_data=True,
    python_requires=">=3.7",
    install_requires=[
        "pandas>=1.0.0",
        "openpyxl>=3.0.0",
        "tqdm>=4.0.0",
    ],
    extras_require={
        "test": ["pytest>=6.0"],
    },
    entry_points={
        "console_scripts": [
            "squad-game-tracker=squad_log_tools.tools.game_tracker:main",
        ],
    },
)
