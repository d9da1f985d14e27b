"""Order Flow Monitor package setup."""
from setuptools import setup, find_packages

setup(
    name="orderflow-monitor",
    version="1.0.0",
    description="Real-time order book aggregation and volume breakout box detection",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.8",
    install_requires=[
        "websocket-client>=1.6.0",
        "PyYAML>=6.0",
        "python-dotenv>=1.0.0",
        "Flask>=2.2.0",
        "sortedcontainers>=2.4.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "orderflow-monitor=orderflow_monitor.monitor:main",
        ],
    },
)
