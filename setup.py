from setuptools import setup, find_packages
import pathlib

# Detect layout
use_src = pathlib.Path("src/maptools").exists()
pkg_args = {"package_dir": {"": "src"}, "packages": find_packages(where="src")} if use_src \
           else {"packages": find_packages(where=".")}

setup(
    name="map-tools",
    version="0.1.0",
    description="Declarative, configuration-driven document transformation",
    python_requires=">=3.8",
    include_package_data=True,
    install_requires=[
        "typer",
        "PyYAML",
        "pandas",
        "pyarrow",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["maptools=maptools.cli:app"],
    },
    **pkg_args
)
