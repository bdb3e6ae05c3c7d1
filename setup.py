from pathlib import Path

from setuptools import setup, find_packages

readme = Path(__file__).parent / "README.md"

setup(
    name="lazyshell",
    version="0.3.0",
    description="CLI assistant that turns plain-language requests into shell commands using LLM providers",
    license="MIT",
    packages=find_packages(include=["lazyshell", "lazyshell.*"]),
    install_requires=[
        "langchain-core>=0.3.0",
        "langchain-community>=0.3.20",
        "langchain-openai>=0.3.0",
        "langchain-anthropic>=0.3.0",
        "langchain-google-genai>=2.1.1",
        "langchain-mistralai>=0.2.9",
        "langchain-ollama>=0.3.0",
        "pydantic>=2.0",
        "python-dotenv>=1.0.0",
        "typer>=0.12.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "lazyshell=lazyshell.main:lazyshell",
        ],
    },
    python_requires=">=3.10",
    long_description=readme.read_text() if readme.exists() else "",
    long_description_content_type="text/markdown",
)
