from setuptools import setup, find_packages

setup(
    name="giftbank",
    version="1.0.0",
    description="Banca de perguntas GIFT (Moodle): pesquisa, composição de exames e simulação com interface Qt6",
    packages=find_packages(exclude=["tests", "samples"]),
    py_modules=["main"],
    install_requires=[
        "PySide6",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "giftbank=main:main",
        ],
    },
    include_package_data=True,
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
)
