from setuptools import find_packages
from setuptools import setup

version = '1.0.0.dev0'

install_requires = [
    'cryptography>=43.0.0',
    'pyasn1>=0.4.8',
]

test_extras = [
    'pytest',
    'pytest-xdist',
]

setup(
    name='josecore',
    version=version,
    description='JOSE key material and algorithm core',
    license='Apache License 2.0',
    python_requires='>=3.9',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: Apache Software License',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Programming Language :: Python :: 3.13',
        'Topic :: Security',
        'Topic :: Security :: Cryptography',
    ],

    packages=find_packages(where='src'),
    package_dir={'': 'src'},
    include_package_data=True,
    package_data={'josecore._internal.tests': ['testdata/*.pem']},
    install_requires=install_requires,
    extras_require={
        'test': test_extras,
    },
)
