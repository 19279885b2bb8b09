from setuptools import find_namespace_packages, setup

setup(
    name="rcleaner",
    version="0.1.0",
    description="Linux disk-space reclamation with safety rules, backups and rollback",
    python_requires=">=3.12",
    packages=find_namespace_packages(include=["rcleaner", "rcleaner.*"]),
    install_requires=[
        "result",
        "rich",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "rcleaner=rcleaner.cli:main",
        ],
    },
)
