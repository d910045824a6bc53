import setuptools

__version__ = '0.1.0'


with open("README.md", "r") as fh:
    long_description = fh.read()


setuptools.setup(
    name='bnurbs',
    version=__version__,
    license='GPL 3.0',
    description='Evaluation of B-spline and NURBS curves: points, tangents and derivatives.',
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        # complete classifier list: http://pypi.python.org/pypi?%3Aaction=list_classifiers
        'Development Status :: 2 - Pre-Alpha',
        'License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)',
        'Programming Language :: Python :: 3',
        'Intended Audience :: Developers',
        'Intended Audience :: Science/Research',
        'Topic :: Scientific/Engineering',
    ],

    keywords=['nurbs', 'b-spline', 'curve', 'cad'],

    packages=['bnurbs'],
    package_dir={'': 'src'},

    include_package_data=True,
    zip_safe=False,
    install_requires=['numpy', 'scipy', 'attrs>=22.1', 'PyYAML'],
    python_requires='>=3.8',
    extras_require={
        'test': ['pytest'],
    },
)
