"""
Setup configuration for the Monte Carlo Pathway Engine
"""
from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Read requirements
with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

# Test and development dependencies
dev_requirements = [
    "pytest>=7.1.0",
    "pytest-cov>=3.0.0",
    "scipy>=1.9.0",
    "black>=22.6.0",
    "isort>=5.10.0",
    "flake8>=5.0.0",
    "mypy>=0.971",
]

setup(
    name="monte-carlo-pathway-engine",
    version="1.0.0",
    author="MCPE Development Team",
    description="Seedable Monte Carlo simulation, tree search, risk and sensitivity engine",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering :: Mathematics",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "dev": dev_requirements,
        "all": dev_requirements
    },
    include_package_data=True,
    zip_safe=False,
    keywords="monte-carlo, mcts, sampling, variance-reduction, sensitivity-analysis, risk",
)
