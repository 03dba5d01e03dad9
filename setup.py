from pathlib import Path

from setuptools import find_packages, setup

setup(
    name='ao2d-converter',
    version='1.0.0',
    packages=find_packages(include=['ao2d', 'ao2d.*']),
    license='GPLv3',
    description='Convert event summary data to flat AO2D tables',
    long_description=(Path(__file__).parent / 'README.rst').read_text(),
    keywords=['ALICE', 'AO2D', 'HDF5', 'particle physics'],
    classifiers=[
        'Intended Audience :: Science/Research',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Scientific/Engineering :: Physics',
        'License :: OSI Approved :: GNU General Public License v3 (GPLv3)',
    ],
    entry_points={
        'console_scripts': [
            'convert_esd = ao2d.converter:main',
        ],
    },
    python_requires='>=3.7',
    install_requires=['numpy', 'tables>=3.3.0', 'progressbar2>=3.7.0'],
    extras_require={'dev': ['Sphinx', 'ruff', 'coverage']},
)
