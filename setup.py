"""
Packaging for the SSAP serial bridge.

    pip install -e .[test]
    pytest src
"""

from setuptools import setup

setup(
    name='ssap-scratch-bridge',
    version='0.1.0',
    description='Bridges an Arduino running the SSAP firmware to Scratch over a serial link.',
    url='',
    author='',
    author_email='',
    license='LGPL',
    package_dir={'': 'src'},
    packages=['ssap', 'ssap.conduit', 'ssap.config', 'ssap.protocol', 'ssap.support', 'ssap.test'],
    package_data={'ssap.config': ['*.cfg']},
    python_requires='>=3.7',
    install_requires=[
        'pyserial>=3.0',
        'configobj>=5.0.6,<5.1',
    ],
    extras_require={
        'test': ['pytest', 'PyHamcrest>=2.0', 'timeout-decorator'],
    },
    entry_points={
        'console_scripts': ['ssap-bridge=ssap.__main__:main'],
    },
    zip_safe=False,
)
