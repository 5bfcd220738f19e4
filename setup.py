from setuptools import setup, find_namespace_packages

setup(
    name="screening-insights",
    version="0.1.0",
    packages=find_namespace_packages(include=["app", "app.*"]),
    py_modules=["screening"],
    install_requires=[
        "fastapi>=0.104.0",
        "uvicorn>=0.24.0",
        "python-dotenv>=1.0.0",
        "pydantic>=2.4.2",
        "pydantic-settings>=2.0.3",
        "httpx>=0.24.0",
        "requests>=2.31.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
)
