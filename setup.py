"""
Setup script de Chip8 VM.

Instala el paquete chip8 y el punto de entrada de línea de comandos.

Uso:
    pip install -e .[test]
"""

from setuptools import find_packages, setup

setup(
    name="chip8-vm",
    version="0.1.0",
    description="Máquina virtual CHIP-8 (intérprete, display 64x32, timers a 60 Hz)",
    python_requires=">=3.10",
    packages=find_packages(include=["chip8", "chip8.*"]),
    py_modules=["main"],
    install_requires=[
        "numpy",
        "pygame-ce",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "chip8-vm=main:main",
        ],
    },
    zip_safe=False,
)
