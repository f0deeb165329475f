from setuptools import setup, find_packages

setup(
    name="cruds",
    packages=find_packages(exclude=["*.tests.*", "tests", "*.tests", "tests.*"]),
    version="1.0.0",
    long_description_content_type="text/markdown",
    long_description=open("README.md").read(),
    description="Users with embedded posts stored in a RavenDB document database",
    license="MIT",
    keywords=[
        "ravendb",
        "nosql",
        "database",
        "crud",
    ],
    python_requires="~=3.7",
    install_requires=[
        "requests >= 2.27.1",
        "ravendb ~= 5.2.5",
    ],
    extras_require={"test": ["dukpy >= 0.3.0"]},
    zip_safe=False,
)
