"""
Setup script for usbdrive
"""

import os

from setuptools import setup, find_packages


def read_file(filename):
    with open(os.path.join(os.path.dirname(__file__), filename), encoding='utf-8') as f:
        return f.read()


setup(
    name='usbdrive',
    version='1.0.0',
    description='Mount disk images as USB mass storage devices through the kernel USB gadget interfaces',
    long_description=read_file('README.md'),
    long_description_content_type='text/markdown',
    license='Apache License 2.0',

    packages=find_packages(exclude=['tests', 'tests.*']),

    install_requires=[
        'click>=8.1.3',
        'tabulate>=0.9.0',
        'python-json-logger>=3.1.0',
    ],

    extras_require={
        'test': [
            'pytest>=7.4.0',
            'pytest-cov>=4.1.0',
        ],
        'dev': [
            'pytest>=7.4.0',
            'pytest-cov>=4.1.0',
            'black>=23.7.0',
            'flake8>=6.1.0',
            'mypy>=1.4.1',
        ],
    },

    entry_points={
        'console_scripts': [
            'usbdrive=usbdrive.cli:main',
        ],
    },

    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: System Administrators',
        'License :: OSI Approved :: Apache Software License',
        'Operating System :: POSIX :: Linux',
        'Operating System :: Android',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Topic :: System :: Hardware :: Universal Serial Bus (USB)',
    ],

    python_requires='>=3.8',

    zip_safe=False,

    keywords='usb gadget mass-storage configfs android iso',
)
