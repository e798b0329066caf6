"""
Display - Pantalla monocroma de 64x32 píxeles

La pantalla de la CHIP-8 es una rejilla de DISPLAY_HEIGHT (32) filas por
DISPLAY_WIDTH (64) columnas de píxeles de un bit, en orden row-major con el
origen (0, 0) en la esquina superior izquierda.

Concepto de Sprites:
- Un sprite tiene 8 píxeles de ancho y de 1 a 15 filas (un byte por fila).
- El bit 7 de cada byte es el píxel más a la izquierda.
- Los sprites se componen con XOR: un bit 1 invierte el píxel, un bit 0 lo deja igual.
- Si un bit 1 apaga un píxel que estaba encendido hay colisión (VF = 1).
- Las filas y columnas que caen fuera de la pantalla se recortan (clipping),
  NO se envuelven al otro lado.

Usamos un array numpy (uint8, forma (32, 64)) como framebuffer: el compuesto
XOR y la detección de colisión se hacen de forma vectorizada sobre la región
visible del sprite.
"""

from __future__ import annotations

import logging

import numpy as np

logger = logging.getLogger(__name__)

DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32
SPRITE_WIDTH = 8
MAX_SPRITE_HEIGHT = 15


class Display:
    """
    Framebuffer de la CHIP-8.

    Solo lo modifican clear() (00E0) y draw() (Dxyn). Los consumidores externos
    (renderer) reciben una copia de solo lectura mediante snapshot().
    """

    def __init__(self) -> None:
        self._pixels = np.zeros((DISPLAY_HEIGHT, DISPLAY_WIDTH), dtype=np.uint8)
        # Indica si el framebuffer cambió desde la última presentación
        self._dirty: bool = True
        logger.debug(f"Display inicializado ({DISPLAY_WIDTH}x{DISPLAY_HEIGHT})")

    def clear(self) -> None:
        """Apaga todos los píxeles."""
        self._pixels.fill(0)
        self._dirty = True

    def draw(self, x: int, y: int, sprite: bytes | bytearray) -> bool:
        """
        Compone un sprite en (x, y) usando XOR.

        Args:
            x: Columna de inicio
            y: Fila de inicio
            sprite: Bytes del sprite, uno por fila (hasta 15)

        Returns:
            True si algún píxel encendido se apagó en ESTA llamada (colisión)
        """
        height = len(sprite)
        if height == 0:
            return False

        row_start = max(y, 0)
        row_end = min(y + height, DISPLAY_HEIGHT)
        col_start = max(x, 0)
        col_end = min(x + SPRITE_WIDTH, DISPLAY_WIDTH)
        if row_start >= row_end or col_start >= col_end:
            # Sprite completamente fuera de pantalla
            return False

        # Expandir cada byte a 8 bits (bit 7 = columna 0)
        bits = np.unpackbits(np.frombuffer(bytes(sprite), dtype=np.uint8)).reshape(height, SPRITE_WIDTH)
        patch = bits[row_start - y:row_end - y, col_start - x:col_end - x]

        # Vista (no copia) de la región visible del framebuffer
        region = self._pixels[row_start:row_end, col_start:col_end]
        collision = bool(np.any(region & patch))
        region ^= patch

        self._dirty = True
        return collision

    def get_pixel(self, x: int, y: int) -> int:
        """Obtiene el valor (0 o 1) del píxel en la columna x, fila y."""
        return int(self._pixels[y, x])

    def lit_count(self) -> int:
        """Número de píxeles encendidos (útil para tests y heartbeat)."""
        return int(np.count_nonzero(self._pixels))

    def snapshot(self) -> np.ndarray:
        """
        Copia inmutable del framebuffer (forma (32, 64), valores 0/1).

        Nunca se expone la referencia interna: el array devuelto es de solo lectura.
        """
        frame = self._pixels.copy()
        frame.flags.writeable = False
        return frame

    def is_dirty(self) -> bool:
        return self._dirty

    def mark_presented(self) -> None:
        """Marca el framebuffer como entregado al renderer."""
        self._dirty = False
