from setuptools import setup, find_packages

setup(
    name="smart_patch",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyyaml",
        "textual",
        "tqdm>=4.60",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "smartpatch=smart_patch.cli:main",
        ],
    },
    author="Uday Kanth",
    description="Fuzzy-matching search/replace and SEARCH/REPLACE patch tools for coding agents.",
)
