# setup.py
from setuptools import setup, find_packages

setup(
    name="site_indexer",
    version="0.1.0",
    description="Асинхронный краулер SiteIndexer: обход сайта браузером и запись страниц в поисковый индекс",
    packages=find_packages(exclude=("tests", "tests.*")),  # найдёт site_indexer и подпакеты
    package_data={"site_indexer.report": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "elasticsearch[async]>=8.12",
        "jinja2>=3.1",
        "lxml>=5.0",
        "openai>=1.30",
        "playwright>=1.44",
        "pydantic>=2.6",
        "python-dotenv>=1.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "site-indexer=site_indexer.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
