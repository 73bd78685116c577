from setuptools import setup, find_packages

setup(
    name="balance-simulator",
    version="0.1.0",
    description="Discrete-time load balancer simulation with hysteresis autoscaling",
    author="adamfilli",
    packages=find_packages(include=["balancesim", "balancesim.*"]),
    install_requires=[
        "matplotlib",
        "pandas",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "balance-simulator=balancesim.cli:main",
        ],
    },
    include_package_data=True,
    python_requires=">=3.11",
)
