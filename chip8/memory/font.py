"""
Tabla de fuente hexadecimal (0-F)

Cada glifo ocupa 5 bytes, uno por fila, con el píxel más a la izquierda en el
bit 7. Solo se usan los 4 bits altos (los glifos miden 4x5 píxeles).
La tabla completa (16 glifos x 5 bytes = 80 bytes) se copia en 0x050.
"""

from __future__ import annotations

# Altura de un glifo en bytes (filas)
GLYPH_HEIGHT = 5
GLYPH_COUNT = 16
FONT_SIZE = GLYPH_HEIGHT * GLYPH_COUNT  # 80 bytes

FONT_SET: bytes = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])
