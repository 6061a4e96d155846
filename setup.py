from setuptools import setup

setup(
    name="spells",
    version="0.1.0",
    author="Varun Bhatnagar",
    author_email="bhatnagarvarun2020@gmail.com",
    description="Indentation-based markup language with scoped components that compiles to html",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=['spells'],
    python_requires=">=3.8",
    install_requires=[
        "watchdog",
        "pyyaml",
        "markdown-it-py",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
