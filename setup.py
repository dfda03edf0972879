from setuptools import setup, find_packages

setup(
    name="icp-contract",
    version="0.1.0",
    description="ICP — interval constraint propagation contractors built from expression trees",
    packages=find_packages(include=["icp", "icp.*"]),
    python_requires=">=3.10",
    install_requires=[
        "z3-solver>=4.12.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "hypothesis>=6.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "icp=icp.cli:main",
        ],
    },
)
