import codecs
import os
import re

from setuptools import find_packages, setup

here = os.path.abspath(os.path.dirname(__file__))


def read_requirements(path):
    with open(os.path.join(here, path)) as requirements_file:
        lines = (line.split("#", 1)[0].strip() for line in requirements_file)
        return [line for line in lines if line]


install_requires = read_requirements("requirements.txt")

# loading version from setup.py
with codecs.open(os.path.join(here, "kadtable/__init__.py"), encoding="utf-8") as init_file:
    version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]", init_file.read(), re.M)
    version_string = version_match.group(1)

extras = {}

extras["dev"] = read_requirements("requirements-dev.txt")

extras["all"] = extras["dev"]

setup(
    name="kadtable",
    version=version_string,
    description="Thread-safe Kademlia routing table",
    long_description="The routing table core of a Kademlia DHT node: xor-metric buckets, "
    "bounded bucket capacity and closest-contacts queries that are safe to use from many threads.",
    author="kadtable contributors",
    packages=find_packages(exclude=["tests"]),
    include_package_data=True,
    license="MIT",
    python_requires=">=3.7",
    install_requires=install_requires,
    extras_require=extras,
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.7",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Topic :: System :: Distributed Computing",
        "Topic :: Software Development :: Libraries",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    keywords="kademlia, dht, routing table, xor metric, peer-to-peer, distributed computing",
)
