from setuptools import setup, find_packages

setup(
    name="hcc-classifier",
    version="1.0.0",
    description="Hierarchical Condition Category classification for risk adjustment",
    author="HCC Classifier Team",
    packages=find_packages(include=["hcc_classifier", "hcc_classifier.*"]),
    py_modules=["hcc_cli"],
    install_requires=[
        "pandas>=2.0.0",
        "numpy>=1.24.0",
        "pydantic>=2.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Healthcare Industry",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
