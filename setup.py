from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="cucumber-runner",
    version="1.0.0",
    author="Your Name",
    author_email="your.email@example.com",
    description="Discover Cucumber scenarios and run them one at a time with cucumber-js",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/cucumber-runner",
    packages=find_packages(exclude=["tests", "tests.*", "examples", "examples.*", "docs"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Testing",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    install_requires=[
        "pyyaml>=6.0.1",
        "click>=8.1.7",
        "pytest>=7.4.3",
        "jinja2>=3.1.2",
        "colorama>=0.4.6",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "dev": [
            "pytest-cov>=4.1.0",
            "black>=23.10.0",
            "flake8>=6.1.0",
            "pre-commit>=3.5.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "cucumber-runner=cucumber_runner.cli:main",
        ],
    },
    include_package_data=True,
    project_urls={
        "Bug Reports": "https://github.com/yourusername/cucumber-runner/issues",
        "Source": "https://github.com/yourusername/cucumber-runner",
    },
    keywords="testing bdd gherkin cucumber cucumber-js scenario runner",
    license="MIT",
)
