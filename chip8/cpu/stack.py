"""
Pila de llamadas (Call Stack)

Secuencia LIFO de direcciones de retorno de 16 bits. 2nnn apila el PC ya
avanzado (la dirección de la instrucción siguiente a la llamada) y 00EE
desapila esa dirección en PC.

El juego de instrucciones no fija una profundidad máxima. Usamos una
capacidad configurable (16 por defecto, como los intérpretes clásicos);
capacity=None equivale a una pila sin límite.
"""

from __future__ import annotations

import logging

from ..errors import StackOverflow, StackUnderflow

logger = logging.getLogger(__name__)

DEFAULT_STACK_CAPACITY = 16


class CallStack:
    """Pila de direcciones de retorno con capacidad acotada."""

    def __init__(self, capacity: int | None = DEFAULT_STACK_CAPACITY) -> None:
        if capacity is not None and capacity < 1:
            raise ValueError(f"Capacidad de pila inválida: {capacity}")
        self._capacity = capacity
        self._frames: list[int] = []

    @property
    def capacity(self) -> int | None:
        return self._capacity

    def push(self, addr: int) -> None:
        """
        Apila una dirección de retorno.

        Raises:
            StackOverflow: Si la pila ya está llena
        """
        if self._capacity is not None and len(self._frames) >= self._capacity:
            raise StackOverflow(
                f"Pila llena ({self._capacity} niveles) al llamar desde 0x{addr:03X}"
            )
        self._frames.append(addr & 0xFFFF)

    def pop(self) -> int:
        """
        Desapila la última dirección de retorno.

        Raises:
            StackUnderflow: Si la pila está vacía
        """
        if not self._frames:
            raise StackUnderflow("Retorno con la pila de llamadas vacía")
        return self._frames.pop()

    def __len__(self) -> int:
        return len(self._frames)

    def snapshot(self) -> tuple[int, ...]:
        return tuple(self._frames)
