#!/usr/bin/env python
from setuptools import setup


setup(
    name="mockwrapper",
    version="0.1.0",
    description="Test doubles which wrap objects, classes and modules, "
                "returning configured values and recording calls.",
    license="BSD",
    py_modules=["mockwrapper", "pytest_mockwrapper"],
    python_requires=">=3.9",
    extras_require={
        "pytest": ["pytest"],
        "test": ["pytest"],
    },
    entry_points={
        "pytest11": ["pytest_mockwrapper = pytest_mockwrapper"],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Framework :: Pytest",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Topic :: Software Development :: Testing",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
)
