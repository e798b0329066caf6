"""
ROM - Carga de programas y fuentes CHIP-8 desde disco

Los programas CHIP-8 se distribuyen como volcados binarios planos (`.ch8`),
sin cabecera: el primer byte del archivo se copia en 0x200. Las fuentes
externas también son volcados planos de exactamente 80 bytes.

Si la ROM excede la capacidad del área de programa (3584 bytes) no es un error:
la memoria la trunca en silencio al cargarla.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .font import FONT_SIZE
from .mmu import PROGRAM_CAPACITY

logger = logging.getLogger(__name__)


class Rom:
    """
    Programa CHIP-8 leído desde un archivo.

    Mantiene los bytes originales del archivo (sin truncar) y expone
    información básica para mostrar al cargar.
    """

    def __init__(self, rom_path: str | Path) -> None:
        """
        Carga la ROM desde el archivo especificado.

        Args:
            rom_path: Ruta al archivo ROM (`.ch8` o cualquier volcado plano)

        Raises:
            FileNotFoundError: Si el archivo no existe
            IOError: Si hay un error al leer el archivo
            ValueError: Si el archivo está vacío
        """
        path = Path(rom_path)

        if not path.exists():
            raise FileNotFoundError(f"ROM no encontrada: {rom_path}")

        try:
            with open(path, "rb") as f:
                self._rom_data = bytes(f.read())
        except IOError as e:
            raise IOError(f"Error al leer ROM: {rom_path}") from e

        if not self._rom_data:
            raise ValueError(f"ROM vacía: {rom_path}")

        self._name = path.name
        logger.info(f"ROM cargada: {path.name} ({len(self._rom_data)} bytes)")

    @property
    def data(self) -> bytes:
        return self._rom_data

    @property
    def name(self) -> str:
        return self._name

    def get_rom_size(self) -> int:
        """Tamaño de la ROM en bytes (sin truncar)."""
        return len(self._rom_data)

    def get_info(self) -> dict[str, str | int | bool]:
        """
        Devuelve un diccionario con la información de la ROM.

        Returns:
            Diccionario con:
            - 'name': Nombre del archivo
            - 'size': Tamaño en bytes
            - 'truncated': True si no cabe entera en el área de programa
        """
        return {
            "name": self._name,
            "size": len(self._rom_data),
            "truncated": len(self._rom_data) > PROGRAM_CAPACITY,
        }


def load_font_file(font_path: str | Path) -> bytes:
    """
    Lee una tabla de fuente externa (volcado plano de 80 bytes).

    Raises:
        FileNotFoundError: Si el archivo no existe
        ValueError: Si el archivo no mide exactamente 80 bytes
    """
    path = Path(font_path)
    if not path.exists():
        raise FileNotFoundError(f"Fuente no encontrada: {font_path}")

    data = path.read_bytes()
    if len(data) != FONT_SIZE:
        raise ValueError(
            f"La fuente debe tener exactamente {FONT_SIZE} bytes, {path.name} tiene {len(data)}"
        )
    logger.info(f"Fuente cargada: {path.name}")
    return data
