from setuptools import setup, find_packages

setup(
    name="chunknav",
    version="0.1.0",
    description="Hierarchical pathfinding over chunked tile grids",
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "networkx",
    ],
    extras_require={
        "test": ["pytest"],
    },
    zip_safe=False,
    packages=find_packages(include=["chunknav", "chunknav.*"]),
)
