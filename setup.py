"""Setup script for the Calendar Clone engine."""

from pathlib import Path

from setuptools import find_packages, setup

# Read the README file
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

requirements = [
    "icalendar>=5.0.0",
    "pydantic>=2.0.0",
    "pydantic-settings>=2.0.0",
    "python-dateutil>=2.8.0",
    "PyYAML>=6.0",
]

test_requirements = [
    "pytest>=7.0.0",
]

setup(
    name="calendar-clone",
    version="1.0.0",
    description="Recurring event expansion and ICS import/export for a calendar application",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Calendar Clone Team",
    # Package configuration
    packages=find_packages(include=["calendarclone", "calendarclone.*"]),
    include_package_data=True,
    # Dependencies
    install_requires=requirements,
    extras_require={
        "test": test_requirements,
        "dev": test_requirements
        + [
            "black>=23.0.0",
            "isort>=5.12.0",
            "mypy>=1.0.0",
            "types-python-dateutil",
            "types-PyYAML",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Office/Business :: Scheduling",
    ],
    keywords="calendar ics icalendar rrule recurrence",
    # Entry points
    entry_points={
        "console_scripts": [
            "calendarclone=calendarclone.__main__:main",
        ],
    },
    zip_safe=False,
)
