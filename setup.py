from __future__ import annotations

from setuptools import find_packages, setup


setup(
    name="docuwrite",
    version="0.1.0",
    description="Merge Markdown sources into an annotated document and render it to PDF with pandoc.",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={"docuwrite.render": ["pandoc_defaults.json"]},
    install_requires=[
        "polars",
        "PyYAML",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "docuwrite=docuwrite.cli:main",
        ],
    },
)
