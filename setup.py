from setuptools import setup, find_packages

setup(
    name="mcp_datacloud",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "mcp>=1.2.0,<2",
        "simple-salesforce>=1.12.5",
        "keyring>=24.3.0",
        "requests>=2.31.0"
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0"
        ]
    },
    entry_points={
        "console_scripts": [
            "mcp-datacloud=mcp_datacloud.__main__:main"
        ]
    },
    python_requires=">=3.9",
)
