from setuptools import setup, find_packages

setup(
    name="tome",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages("src"),
    include_package_data=True,
    install_requires=[
        "chromadb>=1.0.0",
        "sentence-transformers>=2.2.0",
        "numpy>=1.24.0",
        "openai>=1.0.0",
        "anthropic>=0.25.0",
        "markitdown[docx,pdf,pptx,xlsx]>=0.1.0",
        "beautifulsoup4>=4.12.0",
        "aiohttp>=3.9.0",
        "pydantic>=2.0.0",
        "click>=8.1.0",
        "rich>=13.0.0",
        "pyyaml>=6.0.1",
        "aiofiles>=23.2.1",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "tome=tome.cli.main:main",
        ],
    },
    python_requires=">=3.10",
)
