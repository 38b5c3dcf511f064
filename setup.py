"""
Setup script for issue-task-engine package.

Install with: pip install -e . or pip install .
"""

from setuptools import setup, find_packages

setup(
    name="issue-task-engine",
    version="1.0.0",
    description="Work item recommendation and task decomposition engine",
    author="Task Engine Team",
    python_requires=">=3.10",
    packages=find_packages(include=["task_engine", "task_engine.*"]),
    install_requires=[
        "pydantic>=2.0.0",
        "pyyaml>=6.0",
        "rich>=13.0.0",
        "structlog>=23.0.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "task-engine=task_engine.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Bug Tracking",
    ],
)
