from setuptools import find_packages, setup

setup(
    name="cartforest",
    version="0.1.0",
    description="CART classification trees, bagging and random forests with parallel ensemble evaluation.",
    packages=find_packages(include=["cartforest", "cartforest.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.25",
        "pandas>=1.5",
        "scikit-learn>=1.2",
    ],
    extras_require={"test": ["pytest>=7"]},
)
