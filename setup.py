from setuptools import setup, find_packages

setup(
    name="ndnmap-collector",
    version="0.1.0",
    description="Link status collector for the NDN testbed map",
    author="ndnmap Team",
    author_email="ndnmap@example.com",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "prometheus-client>=0.16.0",
        "pyyaml>=6.0",
        "requests>=2.28.2",
        "python-ndn>=0.4.1",
    ],
    extras_require={
        "dev": [
            "pytest>=7.3.1",
            "black>=23.3.0",
            "isort>=5.12.0",
            "mypy>=1.2.0",
            "flake8>=6.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ndnmap-collector=ndnmap_collector.collector:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
        "Topic :: System :: Networking :: Monitoring",
    ],
    python_requires=">=3.9",
)
