from pathlib import Path
from setuptools import setup, find_packages

ROOT = Path(__file__).parent
README = (ROOT / "README.md").read_text(encoding="utf-8")  # markdown is more common

TEST_REQUIRES = ["pytest", "pytest-asyncio", "httpx"]

setup(
    name="firestore_snapshot",
    version="0.1.0",
    description="Typed snapshots and field-safe query building for Google Cloud Firestore",
    long_description=README,
    long_description_content_type="text/markdown",
    license="MIT",
    packages=find_packages(exclude=("tests", "tests.*", "examples")),
    include_package_data=True,           # include py.typed
    package_data={"firestore_snapshot": ["py.typed"]},
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=1.10,<3.0.0",
        "google-cloud-firestore>=2.11.0",  # FieldFilter
        "packaging",
    ],
    extras_require={
        "test": TEST_REQUIRES,
        "dev": ["black", "ruff"] + TEST_REQUIRES,
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Framework :: AsyncIO",
        "Topic :: Database :: Front-Ends",
        "Typing :: Typed",
    ],
    keywords=[
        "firestore",
        "pydantic",
        "snapshot",
        "query builder",
        "google cloud",
    ],
)
