"""
Módulo de memoria

La memoria gestiona el espacio de direcciones de 12 bits de la CHIP-8 (0x000 a 0xFFF).
Incluye también la tabla de fuente y la carga de ROMs desde disco.
"""

from .font import FONT_SET
from .mmu import FONT_START, MEMORY_SIZE, PROGRAM_START, Memory
from .rom import Rom, load_font_file

__all__ = ["Memory", "Rom", "FONT_SET", "FONT_START", "MEMORY_SIZE", "PROGRAM_START", "load_font_file"]
