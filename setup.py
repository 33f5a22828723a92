"""
ModelProvisioner - keep a LiteLLM gateway's model list in sync with its backends.

This setup.py file is the package configuration; `pip install -e .` installs
the `modelprovisioner` package from src/ in development mode.
"""

from setuptools import find_packages, setup

if __name__ == "__main__":
    setup(
        name="modelprovisioner",
        version="0.1.0",
        description="Reconcile a LiteLLM gateway's registered models with the models served by its inference backends.",
        long_description=open("README.md").read(),
        long_description_content_type="text/markdown",
        url="https://github.com/mono-of-pg/ModelProvisioner",
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        python_requires=">=3.11",
        install_requires=[
            "httpx>=0.27",
            "pydantic>=2.5",
            "PyYAML>=6.0",
        ],
        extras_require={
            "test": [
                "pytest>=7.4",
            ],
        },
        entry_points={
            "console_scripts": [
                "modelprovisioner=modelprovisioner.cli:main",
            ],
        },
        classifiers=[
            "Development Status :: 4 - Beta",
            "Intended Audience :: System Administrators",
            "Programming Language :: Python :: 3",
            "Programming Language :: Python :: 3.11",
            "Programming Language :: Python :: 3.12",
            "Topic :: System :: Systems Administration",
        ],
    )
