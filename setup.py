from setuptools import setup, find_packages

with open("requirements.txt") as f:
    requirements = f.read().splitlines()

setup(
    name="fleettrack",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.0",
            "responses>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "fleettrack=fleettrack.cli_module.cli:main",
            "fleettrack-server=fleettrack.store.dev_server:cli",
        ],
    },
)
