from __future__ import annotations

from setuptools import find_packages, setup

from config.version import PROJECT_VERSION, PYTHON_REQUIRES_SPECIFIER

INSTALL_REQUIRES = [
    "feedparser>=6.0",
    "httpx>=0.27",
    "loguru>=0.7",
    "pydantic>=2.5",
    "python-dotenv>=1.0",
    "tomli>=2.0; python_version < '3.11'",
]

EXTRAS_REQUIRE = {
    "test": [
        "hypothesis>=6.100",
        "pytest>=8.0",
    ],
}

if __name__ == "__main__":
    setup(
        name="newsdesk-aggregator",
        version=PROJECT_VERSION,
        description="Multilingual news feed aggregator with background translation",
        python_requires=PYTHON_REQUIRES_SPECIFIER,
        packages=find_packages(include=["config", "newsdesk", "src", "src.*"]),
        py_modules=["main"],
        install_requires=INSTALL_REQUIRES,
        extras_require=EXTRAS_REQUIRE,
        entry_points={
            "console_scripts": [
                "newsdesk=main:main",
                "newsdesk-config=newsdesk.config_manager:main",
            ],
        },
    )
