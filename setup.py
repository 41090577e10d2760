from setuptools import setup, find_packages

# Bloch-Redfield tensor assembly and eigenbasis time evolution on top of QuTiP.
setup(
    name="qredfield",
    version="0.1.0",
    packages=find_packages(include=["qredfield", "qredfield.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "qutip>=5.0",
        "PyYAML",
    ],
    extras_require={"test": ["pytest"]},
    author="Leopold Bodamer",
    description="Bloch-Redfield master equations in the Hamiltonian eigenbasis",
)
