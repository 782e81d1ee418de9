from setuptools import find_packages, setup

setup(
    name="hookrelay",
    version="0.1.0",
    description="Priority-ordered hook registry with action and filter dispatch",
    packages=find_packages(include=["hookrelay", "hookrelay.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2",
        "PyYAML>=6",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
)
