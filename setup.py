"""
Setup script for ZoneTrack
Run: pip install -e .[test]
"""

from setuptools import find_packages, setup

setup(
    name='ZoneTrack',
    version='1.0.0',
    description='Heart-rate zone tracking for FIT activity files',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    python_requires='>=3.10',
    install_requires=[
        'fitparse',
        'pandas',
        'numpy',
        'reverse_geocoder',
        'pydantic',
        'pydantic-settings',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'zonetrack=zonetrack.cli:main',
        ],
    },
)
