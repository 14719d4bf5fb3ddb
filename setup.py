
import os
import re
from setuptools import setup, find_packages
import sys

assert sys.version_info >= (3,6)

def read(filename):
    with open(os.path.join(os.path.dirname(__file__), filename)) as f:
        return f.read()

def read_version(filename):
    version = re.search(r"__version__ = ('|\")(.*?)('|\")", read(filename)).group(2)
    force_version = os.environ.get("BOOTBUILD_FORCE_DIST_VERSION")
    if force_version:
        return force_version.format(version=version)
    return version

setup(
    name = 'bootbuild',
    version = read_version('bootbuild/__init__.py'),
    description = "Build container images of a project with a builder image",
    long_description=read("README.md"),
    long_description_content_type='text/markdown',
    packages = find_packages('.', include=['bootbuild', 'bootbuild.*']),
    install_requires = [
        'click>=5.0',
        'pyyaml',
        'docker',
        'dockerpty',
        'jinja2',
    ],
    extras_require = {
        'test': ["pytest"],
    },
    entry_points = {
        'console_scripts' : [
            "bootbuild=bootbuild:cli",
        ]
    },
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Topic :: Software Development :: Build Tools',
        'Environment :: Console',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
    ],
)
