from setuptools import find_packages, setup

"""
# Usage instructions
#
# To install the package
#   'pip install .'
#
# With every compared library and the test dependencies
#   'pip install -e ".[all,test]"'
"""

setup(
    name="crdt_bench",
    version="0.1.0",
    description="Throughput comparison of CRDT implementations",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "msgspec>=0.18",
        "numpy>=1.26",
        "pyzmq>=25.0",
    ],
    extras_require={
        "yjs": ["pycrdt>=0.10"],
        "automerge": ["automerge>=1.0.0rc1"],
        "loro": ["loro>=1.0"],
        "all": ["pycrdt>=0.10", "automerge>=1.0.0rc1", "loro>=1.0"],
        "test": ["pytest>=8.0", "pytest-asyncio>=0.23"],
    },
    entry_points={
        "console_scripts": ["crdt-bench=crdt_bench.cli:main"],
    },
)
