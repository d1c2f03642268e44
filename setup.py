"""Setup script for the raw HTTP client package."""

from setuptools import setup, find_packages

requires = ["trio>=0.22"]

extras = {"test": ["pytest>=7.0", "trustme>=1.0"]}

__version__ = None
exec(open("src/rawhttp/version.py").read())

setup(
    name="rawhttp",
    version=__version__,
    author="rawhttp contributors",
    author_email="rawhttp@example.com",
    description="Very low-level HTTP client for sending deliberately malformed requests",
    package_dir={"": "src"},
    packages=find_packages("src", exclude=["test"]),
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=requires,
    extras_require=extras,
)
