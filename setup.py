from setuptools import setup  # type: ignore

setup(
    name="userlink",
    version="0.0.0",
    packages=[
        "userlink",
        "userlink.application",
        "userlink.application.connection",
        "userlink.application.sign_in",
        "userlink.common",
        "userlink.domain",
        "userlink.domain.repo",
        "userlink.infra",
    ],
    python_requires=">=3.11",
    install_requires=[
        "cryptography>=41.0.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": ["userlink=userlink.cli:main"],
    },
)
