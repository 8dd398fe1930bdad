"""
Setup script for the FRA Atlas application.
"""

from setuptools import setup, find_packages

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

# Separate development requirements
dev_requirements = [req for req in requirements if any(dev in req for dev in ["pytest"])]
install_requirements = [req for req in requirements if req not in dev_requirements]

setup(
    name="fra-atlas",
    version="1.0.0",
    author="Data Analytics Team",
    description="Forest-rights claims mapped over Indian administrative boundaries",
    long_description="FRA Atlas - An interactive map of forest-rights claims with a country, state and district boundary drill-down, claim filters, location search and drawing tools.",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    install_requires=install_requirements,
    extras_require={
        "dev": dev_requirements,
    },
    python_requires=">=3.9",
    entry_points={
        "console_scripts": [
            "fra-atlas=main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
