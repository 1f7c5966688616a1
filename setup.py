# setup.py
from setuptools import setup, find_packages

setup(
    name="chatagent",
    version="0.1.0",
    description="A CLI agent that turns natural-language change requests into staged file operations on a local repository.",
    author="ChatAgent Developers",
    packages=find_packages(include=['chatagent', 'chatagent.*']),
    include_package_data=True,
    # 提示模板和默认配置模板随包发布
    package_data={
        'chatagent': ['templates/*.j2', 'templates/prompts/*.j2'],
    },
    install_requires=[
        "click>=8.0",
        "pyyaml",
        "jinja2",
        "rich",
        "openai>=1.0",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'chatagent = chatagent.cli:cli',
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Build Tools",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
