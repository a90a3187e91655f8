from setuptools import setup, find_packages

setup(
    name="form-json-repair",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "fastapi>=0.110",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "structlog>=23.1",
        "uvicorn>=0.27",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "hypothesis>=6.90",
            "httpx>=0.25",
        ],
    },
    entry_points={
        "console_scripts": [
            "form-json-repair=form_json_repair.core.cli:main",
        ],
    },
    author="Marketplace Console Team",
    description="Lenient repair and validation of operator-typed JSON form fields.",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
)
