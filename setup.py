"""
Setup configuration for the Photo Place Renamer package.
"""

from setuptools import setup, find_packages
import os

# Read the README file
def read_readme():
    readme_path = os.path.join(os.path.dirname(__file__), 'README.md')
    if os.path.exists(readme_path):
        with open(readme_path, 'r', encoding='utf-8') as f:
            return f.read()
    return "Photo Place Renamer - Rename photos by capture date and place name"

# Read requirements
def read_requirements():
    requirements_path = os.path.join(os.path.dirname(__file__), 'requirements.txt')
    if os.path.exists(requirements_path):
        with open(requirements_path, 'r', encoding='utf-8') as f:
            return [line.strip() for line in f if line.strip() and not line.startswith('#')]
    return []

setup(
    name="photo-place-renamer",
    version="1.0.0",
    author="Photo Place Renamer Team",
    author_email="",
    description="Rename photos by sequence number, capture date and reverse-geocoded place",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    url="",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Multimedia :: Graphics",
        "Topic :: Utilities",
    ],
    python_requires=">=3.8",
    install_requires=read_requirements(),
    extras_require={
        "test": ["pytest>=7.0", "Pillow>=9.0.0"],
    },
    entry_points={
        "console_scripts": [
            "photo-place-renamer=photo_place_renamer.main:main",
        ],
    },
    keywords="photos, rename, gps, exif, geocoding",
    project_urls={
        "Bug Reports": "",
        "Source": "",
    },
)
