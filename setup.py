#!/usr/bin/env python3
"""Setup script for pybloom_adaptive - fixed and adaptive Bloom filters."""
from setuptools import setup

VERSION = "1.0.0"
DESCRIPTION = "Bloom filter with a self-resizing adaptive variant"
LONG_DESCRIPTION = """
A pure-Python Bloom filter implementation with xxHash hashing and bitarray
storage.

This module provides two implementations:
- BloomFilter: Fixed-size filter, bit count and hash count chosen up front
- AdaptiveBloomFilter: Grows its bit array as load increases, rebuilding
  from a log of inserted items so no element is lost on resize

Features:
- Fast xxHash seeded hash family, or any user supplied hash callables
- Space-efficient bit array storage
- False positive rate estimation
- Set operations (union, intersection) on fixed filters
"""

CLASSIFIERS = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "License :: OSI Approved :: MIT License",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: Utilities",
]

setup(
    name="pybloom_adaptive",
    version=VERSION,
    description=DESCRIPTION,
    long_description=LONG_DESCRIPTION,
    long_description_content_type="text/plain",
    classifiers=CLASSIFIERS,
    keywords=[
        "bloom filter",
        "probabilistic",
        "data structures",
        "set membership",
        "adaptive",
        "xxhash",
    ],
    license="MIT License",
    platforms=["any"],
    python_requires=">=3.6",
    install_requires=["bitarray>=2.0.0", "xxhash>=3.0.0"],
    extras_require={"test": ["pytest>=7.0.0"]},
    packages=["pybloom_adaptive"],
    zip_safe=True,
)
