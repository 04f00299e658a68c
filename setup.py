from setuptools import find_packages, setup

setup(
    name="gitlab-reader",
    version="0.1.0",
    license="Apache License 2.0",

    python_requires=">=3.11",
    description="Read-only GitLab API client resolving tags, files, archives "
                "and commit histories of branches, tags and commit hashes.",

    packages=find_packages(exclude=('tests', 'tests.*')),

    install_requires=[
        "httpx>=0.27,<1.0",
        "pydantic~=2.7",
        "pydantic-settings~=2.3",
        "structlog>=24.1",
        "prometheus-client>=0.20",
        "Click>=8.0,<9.0",
        "tabulate>=0.9.0,<0.10.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },

    test_suite="tests",

    classifiers=[
        'Development Status :: 2 - Pre-Alpha',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.12',
    ],
    entry_points={
        'console_scripts': [
            'gitlab-reader = gitlab_reader.cli:cli',
        ],
    },
)
