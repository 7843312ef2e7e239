from setuptools import setup, find_packages

setup(
    name="robotlang",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["rlang"],
    package_data={"robotlang": ["grammar.lark"]},
    install_requires=[
        "lark",
        "pydantic>=2.0",
        "loguru>=0.7",
        "opentelemetry-api",
        "opentelemetry-sdk",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "rlang=rlang:main",
        ],
    },
    python_requires=">=3.10",
)
