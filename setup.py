"""Setup configuration for photo-index package."""

from setuptools import find_packages, setup

# Read version from __version__.py
version = {}
with open("src/python/photo_index/__version__.py") as f:
    exec(f.read(), version)

# Read README
with open("README.md", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="photo-index",
    version=version["__version__"],
    description="Keep a photo catalog database in sync with a directory of originals",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Home Media Team",
    python_requires=">=3.11",
    package_dir={"": "src/python"},
    packages=find_packages(where="src/python"),
    install_requires=[
        "pyyaml>=6.0.1",
        "pillow>=10.2.0",
        "exifread>=3.0.0",
        "sqlalchemy>=2.0",
        "requests>=2.31.0",
        "click>=8.1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=8.0.0",
            "pytest-cov>=4.1.0",
            "pytest-mock>=3.12.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "photo-index=photo_index.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
    ],
)
