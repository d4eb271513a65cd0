# -*- coding: utf-8 -*-

import os

from setuptools import setup


with open("README.rst") as readme_file:
    long_description = readme_file.read()

with open(os.path.join("coincidence", "VERSION")) as version_file:
    version = version_file.read().strip()

install_requires = ['neo>=0.10.0',
                    'numpy>=1.19.5',
                    'quantities>=0.14.1']
extras_require = {'docs': ['numpydoc>=1.1.0',
                           'sphinx>=3.3.0'],
                  'tests': ['pytest']}

setup(
    name="coincidence",
    version=version,
    packages=['coincidence', 'coincidence.test'],
    package_data={'coincidence': ['VERSION']},
    install_requires=install_requires,
    extras_require=extras_require,
    python_requires=">=3.8",

    author="coincidence authors and contributors",
    description="Counting and histogramming coincident spikes between pairs "
                "of spike trains",
    long_description=long_description,
    long_description_content_type="text/x-rst",
    license="BSD",
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: BSD License',
        'Natural Language :: English',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Topic :: Scientific/Engineering'],
)
