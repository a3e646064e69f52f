from setuptools import setup, find_packages

setup(
    name="algct",
    version="0.1.0",
    description="Algebraic computed tomography (CT) reconstruction with on-demand ray projectors and differentiable operators",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "numba",
        "torch",
    ],
    extras_require={
        "tests": ["pytest"],
    },
    license="Apache 2.0",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Topic :: Scientific/Engineering :: Medical Science Apps",
    ],
    python_requires=">=3.10",
)
