"""
python -m build
twine upload dist/*
"""

from setuptools import setup, find_packages


def cattery_setup():
    with open("requirements.txt", "rt") as fp:
        install_requires = fp.read().strip().split("\n")

    version = "1.0.0"

    setup(
        name="cattery",
        packages=find_packages(exclude=["tests", "tests.*", "examples"]),
        version=version,
        license="MIT",
        description="cattery : JSON:API for cats and hobbies with Flask and SQLAlchemy",
        long_description=open("README.rst").read(),
        keywords=["SqlAlchemy", "Flask", "REST", "JsonAPI"],
        python_requires=">=3.8, <4",
        install_requires=install_requires,
        classifiers=[
            "Development Status :: 3 - Alpha",
            "License :: OSI Approved :: MIT License",
            "Intended Audience :: Developers",
            "Framework :: Flask",
            "Environment :: Web Environment",
            "Programming Language :: Python :: 3",
        ],
        extras_require={"test": ["pytest>=7"]},
    )


cattery_setup()  # pragma: no cover
