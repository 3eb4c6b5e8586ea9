from setuptools import setup, find_packages

setup(
    name="bondcalc",
    version="0.1.0",
    description="Bond pricing, yield and risk analytics engine",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "pandas",
        "scipy",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.8",
)
