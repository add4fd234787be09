# -*- coding: utf-8 -*-
from setuptools import setup, find_packages

long_description = "TradingView-style technical indicators for Pandas, computed as streaming state machines"

setup(
    name = "pandas_ta_pine",
    packages = find_packages(include=["pandas_ta_pine", "pandas_ta_pine.*"]),
    version = "0.1.0",
    description=long_description,
    long_description=long_description,
    author = "Han Sang Woo",
    author_email = "hsangwoo5@naver.com",
    url = "https://github.com/glar1900/pandas-ta-stateful",
    keywords = ['technical analysis', 'python3', 'pandas', 'tradingview', 'pine'],
    license="The MIT License (MIT)",
    classifiers = [
        'Programming Language :: Python :: 3.9',
        'Development Status :: 3 - Alpha',
        'License :: OSI Approved :: MIT License',
        'Natural Language :: English',
        'Intended Audience :: Developers',
        'Intended Audience :: Financial and Insurance Industry',
        'Topic :: Office/Business :: Financial :: Investment',
    ],
    python_requires=">=3.9",
    install_requires=['numpy', 'pandas<3', 'numba'],

    # List additional groups of dependencies here (e.g. development dependencies).
    # You can install these using the following syntax, for example:
    # $ pip install -e .[dev,test]
    extras_require = {
        'dev': ['ta-lib'],
        'test': ['pytest'],
    },
)
