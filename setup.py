import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="biorecords",
    version="0.0.1",
    description="Streaming readers and writers for line-oriented bioinformatics formats",
    long_description=long_description,
    long_description_content_type="text/markdown",
    install_requires=[
        "biopython",
        "pyyaml"
        ],
    packages=setuptools.find_packages(exclude=["test_*"]),
    include_package_data=True,
    package_data={"biorecords": ["data/*.yml"]},
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: POSIX :: Linux",
    ],
)
