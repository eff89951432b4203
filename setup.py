from setuptools import setup

with open("README.md") as f:
    long_description = f.read()

setup(
    name="async-deadline",
    description="AsyncIO poll-based timeouts and deadline-bound promises",
    long_description=long_description,
    long_description_content_type="text/markdown",
    version="1.0.0",
    license="Apache2",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Framework :: AsyncIO",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
    ],
    python_requires=">=3.9",
    packages=["deadline", "deadline.cli"],
    install_requires=[
        "async-timeout>=4.0.0",
        "click>=8.0",
    ],
    extras_require={
        "prometheus": ["prometheus-client>=0.15.0"],
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
            "python-dotenv>=0.19",
        ],
    },
    entry_points={
        "console_scripts": ["async-deadline=deadline.cli:main"],
    },
)
