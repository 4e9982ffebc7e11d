from setuptools import setup, find_packages


install_requires = [
    'PyYAML>=3.0',
    'jsonschema>=4',
    'werkzeug<4',
    'redis>=4',
]

tests_require = [
    'pytest',
    'WebTest',
]


def long_description():
    return open('README.md').read()


setup(
    name='TileProxy',
    version="1.0.0",
    description='A caching reverse proxy for raster map tiles',
    long_description=long_description(),
    long_description_content_type='text/markdown',
    author='TileProxy contributors',
    license='Apache Software License 2.0',
    packages=find_packages(),
    include_package_data=True,
    entry_points={
        'console_scripts': [
            'tileproxy-util = tileproxy.script.util:main',
        ],
    },
    package_data={'': ['*.yaml', '*.wsgi', '*.ini', '*.json']},
    install_requires=install_requires,
    extras_require={
        'test': tests_require,
    },
    python_requires='>=3.10',
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Internet :: Proxy Servers",
        "Topic :: Internet :: WWW/HTTP :: WSGI",
        "Topic :: Scientific/Engineering :: GIS",
    ],
    zip_safe=False
)
