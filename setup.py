"""
Setup script for the Chittoor project tracker.
"""

from setuptools import setup, find_packages

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

# Separate development requirements
dev_requirements = [req for req in requirements if any(dev in req for dev in ["pytest", "black", "flake8", "mypy"])]
install_requirements = [req for req in requirements if req not in dev_requirements]

setup(
    name="chittoor-tracker",
    version="1.0.0",
    author="Data Analytics Team",
    description="Project tracking toolkit for Chittoor solar installations",
    long_description="Chittoor Project Tracker - village/mandal location reconciliation, project records synced with CRM approvals, and project analytics reports.",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    package_data={
        "chittoor_tracker": ["data/*.csv"],
    },
    install_requires=install_requirements,
    extras_require={
        "dev": dev_requirements,
    },
    python_requires=">=3.9",
    entry_points={
        "console_scripts": [
            "chittoor-tracker=main:main",
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
