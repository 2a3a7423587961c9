from setuptools import setup, find_packages

setup(
    name="type5-ndef",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    install_requires=[
        "pyscard",  # Used for PC/SC reader communication
        "ndeflib",  # Used for NDEF message encoding/decoding (import ndef)
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["type5-ndef=main:main"],
    },
    python_requires=">=3.7",
)
