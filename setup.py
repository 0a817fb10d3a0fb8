import os

from setuptools import find_packages, setup

README = os.path.join(os.path.dirname(__file__), "README.md")


def readme() -> str:
    with open(README, encoding="utf-8") as f:
        return f.read()


setup(
    name="json_schema_to_validator",
    version="1.0.0",
    description="Convert OpenAPI/JSON Schema trees into pydantic, marshmallow and jsonschema validators and source code",
    long_description=readme(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Code Generators",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Intended Audience :: Developers",
    ],
    keywords="json schema openapi validation pydantic marshmallow jsonschema code generation",
    license="MIT",
    packages=find_packages(),
    python_requires=">=3.11",
    install_requires=[
        "click>=8.2.0",
        "jinja2>=3.0.0",
        "pydantic[email]>=2.6.0",
        "marshmallow>=3.13.0",
        "jsonschema[format-nongpl]>=4.18.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "json_schema_to_validator=json_schema_to_validator.json_schema_to_validator:json_schema_to_validator",
        ],
    },
    include_package_data=True,
    package_data={
        "json_schema_to_validator": ["templates/*.jinja2", "tests/test_data/*.json"],
    },
    zip_safe=False,
)
