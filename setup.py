"""
Setup script for vecsum - pure Python, numpy and pyarrow do the heavy lifting.
"""

from setuptools import find_packages
from setuptools import setup

LIBRARY = "vecsum"

# Read version and metadata
with open(f"{LIBRARY}/__version__.py", "r", encoding="UTF8") as v:
    exec(v.read())

with open("README.md", "r", encoding="UTF8") as f:
    long_description = f.read()

# Setup configuration
setup(
    name=LIBRARY,
    version=__version__,
    description="Read throughput benchmark for standard, zero-copy and memory mapped reads",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=[LIBRARY, f"{LIBRARY}.*"]),
    python_requires=">=3.11",
    install_requires=[
        "numpy",
        "orjson",
        "psutil",
        "pyarrow",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["vecsum=vecsum.__main__:main"]},
    zip_safe=False,
)
