from pathlib import Path

from setuptools import find_packages, setup

# Load packages from requirements.txt
BASE_DIR = Path(__file__).parent
with open(Path(BASE_DIR, "requirements.txt")) as file:
    required_packages = [
        ln.strip() for ln in file.readlines() if ln.strip() and not ln.startswith("#")
    ]

# Define our package
setup(
    name="speakly",
    version="0.1",
    description="Vocabulary practice web app with AI level placement and quiz sessions",
    python_requires=">=3.10",
    packages=find_packages(include=["speakly", "speakly.*"]),
    package_data={
        "speakly": [
            "data/*.json",
            "schemas/*.schema.json",
            "web/templates/*.html",
        ],
    },
    include_package_data=True,
    install_requires=required_packages,
    extras_require={
        "test": ["pytest>=7.4", "httpx>=0.25", "anyio>=3.7"],
        "dev": ["pre-commit==2.19.0"],
    },
    entry_points={
        "console_scripts": ["speakly=speakly.run:main"],
    },
)
