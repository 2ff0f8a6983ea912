from setuptools import setup, find_packages

setup(
    name="patternbus",
    version="0.1.0",
    description="In-process publish/subscribe message bus with structural pattern matching",
    packages=find_packages(where=".", include=["patternbus", "patternbus.*"]),
    package_dir={"": "."},
    include_package_data=True,
    package_data={"patternbus": ["config/*.json"]},
    install_requires=[
        "colorama",
        "python-dotenv",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "patternbus=patternbus.__main__:main",
        ],
    },
    python_requires=">=3.10",
    classifiers=[
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
