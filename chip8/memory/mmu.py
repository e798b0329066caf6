"""
Memoria - Espacio de direcciones de la CHIP-8

La CHIP-8 tiene un espacio de direcciones de 12 bits (0x000 a 0xFFF = 4096 bytes):

- 0x000 - 0x04F: Reservado (relleno de ceros, el intérprete no lo escribe)
- 0x050 - 0x09F: Fuente hexadecimal (16 glifos x 5 bytes)
- 0x0A0 - 0x1FF: Reservado (relleno de ceros)
- 0x200 - 0xFFF: Programa cargado (ROM) y datos del programa

Usamos un bytearray lineal de 4096 bytes. A diferencia de un acceso crudo,
todas las lecturas y escrituras comprueban límites y lanzan MemoryFault si la
dirección cae fuera del rango: nunca se lee ni escribe memoria adyacente.

CRÍTICO: Las instrucciones son Big-Endian (el byte alto va primero).
"""

from __future__ import annotations

import logging

from ..errors import MemoryFault
from .font import FONT_SIZE

logger = logging.getLogger(__name__)

# Tamaño total del espacio de direcciones
MEMORY_SIZE = 0x1000  # 4096 bytes
ADDRESS_MAX = MEMORY_SIZE - 1  # 0xFFF

# Regiones reservadas
FONT_START = 0x050
FONT_END = FONT_START + FONT_SIZE  # 0x0A0 (exclusivo)
PROGRAM_START = 0x200
PROGRAM_CAPACITY = MEMORY_SIZE - PROGRAM_START  # 3584 bytes


class Memory:
    """
    Memoria plana de 4096 bytes con comprobación de límites.

    Las únicas escrituras legítimas vienen de la carga de programa/fuente
    (colaboradores externos) y de los opcodes Fx33 y Fx55.
    """

    MEMORY_SIZE = MEMORY_SIZE

    def __init__(self) -> None:
        """Inicializa los 4096 bytes a 0."""
        self._memory: bytearray = bytearray(self.MEMORY_SIZE)

    def _check_range(self, addr: int, size: int = 1) -> None:
        if addr < 0 or size < 0 or addr + size > self.MEMORY_SIZE:
            raise MemoryFault(addr, size)

    def read_byte(self, addr: int) -> int:
        """
        Lee un byte de la dirección especificada.

        Args:
            addr: Dirección de memoria (0x000 a 0xFFF)

        Returns:
            Valor del byte leído (0x00 a 0xFF)

        Raises:
            MemoryFault: Si la dirección está fuera del rango válido
        """
        self._check_range(addr)
        return self._memory[addr]

    def write_byte(self, addr: int, value: int) -> None:
        """
        Escribe un byte en la dirección especificada (el valor se enmascara a 8 bits).

        Raises:
            MemoryFault: Si la dirección está fuera del rango válido
        """
        self._check_range(addr)
        self._memory[addr] = value & 0xFF

    def read_word(self, addr: int) -> int:
        """
        Lee una palabra de 16 bits en formato Big-Endian.

        El byte en addr es el alto y el de addr+1 el bajo.
        Si addr+1 excede 0xFFF se lanza MemoryFault.
        """
        self._check_range(addr, 2)
        return (self._memory[addr] << 8) | self._memory[addr + 1]

    def read_block(self, addr: int, size: int) -> bytes:
        """Lee size bytes a partir de addr (copia inmutable)."""
        self._check_range(addr, size)
        return bytes(self._memory[addr:addr + size])

    def write_block(self, addr: int, data: bytes | bytearray | list[int]) -> None:
        """Escribe un bloque de bytes a partir de addr."""
        self._check_range(addr, len(data))
        for offset, value in enumerate(data):
            self._memory[addr + offset] = value & 0xFF

    def load_program(self, data: bytes | bytearray) -> int:
        """
        Copia el programa en 0x200.

        Si el programa no cabe, se trunca en silencio a la capacidad restante
        (3584 bytes): no es un error.

        Args:
            data: Bytes del programa (volcado plano, sin cabecera)

        Returns:
            Número de bytes realmente copiados
        """
        payload = bytes(data[:PROGRAM_CAPACITY])
        if len(payload) < len(data):
            logger.info(
                f"Programa truncado: {len(data)} bytes, solo caben {PROGRAM_CAPACITY}"
            )
        self._memory[PROGRAM_START:PROGRAM_START + len(payload)] = payload
        logger.debug(f"Programa cargado en 0x{PROGRAM_START:03X} ({len(payload)} bytes)")
        return len(payload)

    def load_font(self, font: bytes | bytearray) -> None:
        """
        Copia la tabla de fuente (exactamente 80 bytes) en 0x050.

        Raises:
            ValueError: Si la fuente no mide exactamente 80 bytes
        """
        if len(font) != FONT_SIZE:
            raise ValueError(
                f"La fuente debe tener exactamente {FONT_SIZE} bytes, tiene {len(font)}"
            )
        self._memory[FONT_START:FONT_END] = bytes(font)
        logger.debug(f"Fuente cargada en 0x{FONT_START:03X}")

    def dump(self) -> bytes:
        """Copia inmutable de toda la memoria (para tests y depuración)."""
        return bytes(self._memory)
