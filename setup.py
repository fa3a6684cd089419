from setuptools import setup, find_packages


install_requires = [
    'PyYAML>=3.0',
    'pyproj>=2',
    'jsonschema>=4',
    'shapely>=2',
    'jinja2',
]


def long_description():
    return open('README.md').read()


setup(
    name='GridCache',
    version="0.9.0",
    description='Tile pyramid addressing, seeding and truncating for tile caches',
    long_description=long_description(),
    long_description_content_type='text/markdown',
    author='GridCache contributors',
    license='Apache Software License 2.0',
    packages=find_packages(exclude=['gridcache.test', 'gridcache.test.*']),
    include_package_data=True,
    entry_points={
        'console_scripts': [
            'gridcache-util = gridcache.script.util:main',
        ],
    },
    package_data={'': ['*.json'], 'gridcache': ['templates/*.kml']},
    install_requires=install_requires,
    extras_require={
        'test': ['pytest'],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Scientific/Engineering :: GIS",
    ],
    zip_safe=False
)
