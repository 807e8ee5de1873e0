from setuptools import setup, find_namespace_packages


setup(
    name='launchpad_core',
    version='0.1',
    packages=find_namespace_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[
        'flask',
        'flask-openapi3',
        'pydantic',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'launchpad_core = launchpad_core.main:main',
        ],
    },
)
