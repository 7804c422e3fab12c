"""Setup configuration for live hedge decision support."""
from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

setup(
    name="live-hedge-core",
    version="1.0.0",
    description="Live in-game hedge recommendations for NBA player prop picks",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Green Bier Ventures",
    python_requires=">=3.11",
    packages=find_packages(where=".", include=["live_hedge", "live_hedge.*"]),
    package_dir={"": "."},
    install_requires=[
        "pandas==2.2.3",
        "numpy==1.26.4",
        "pydantic==2.9.2",
    ],
    extras_require={
        "dev": [
            "pytest==8.3.3",
            "black",
            "flake8",
            "mypy",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Games/Entertainment",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
