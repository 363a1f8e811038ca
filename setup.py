from setuptools import find_packages, setup
from pathlib import Path

setup(
    name="point_marker",
    version=Path("./point_marker/VERSION").read_text().strip(),
    packages=find_packages(include=["point_marker", "point_marker.*"]),
    package_data={"point_marker": ["VERSION"]},
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "opencv-python-headless",
        "easydict",
        "matplotlib",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["point_marker=point_marker.cli:main"],
    },
)
