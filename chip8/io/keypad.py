"""
Keypad - Teclado hexadecimal de 16 teclas

La CHIP-8 tiene 16 teclas lógicas, indexadas de 0x0 a 0xF:

    1 2 3 C
    4 5 6 D
    7 8 9 E
    A 0 B F

El estado de las teclas pertenece a la fuente de entrada externa (el
renderer traduce los eventos del teclado del host). La CPU solo lee: al
principio de cada ciclo toma un snapshot inmutable del estado, de modo que
no hace falta ningún cerrojo aunque la fuente de entrada y la CPU
compartan el objeto.

Una pulsación breve (press y release entre dos ciclos de la CPU) no se
pierde: press() la deja enclavada hasta el siguiente sample(), de modo que la
CPU ve la tecla pulsada durante al menos un ciclo.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

KEY_COUNT = 16


class Keypad:
    """
    Estado de las 16 teclas (True = pulsada, False = soltada).

    press()/release() los invoca la fuente de entrada; la CPU solo usa
    sample().
    """

    def __init__(self) -> None:
        """Inicializa el teclado con todas las teclas soltadas."""
        self._state: list[bool] = [False] * KEY_COUNT
        # Teclas pulsadas desde el último sample() (aunque ya se hayan soltado)
        self._latched: set[int] = set()
        logger.debug("Keypad inicializado: todas las teclas soltadas")

    def press(self, key: int) -> None:
        """
        Marca una tecla como pulsada.

        Args:
            key: Índice de la tecla (0x0 a 0xF)
        """
        if not 0 <= key < KEY_COUNT:
            logger.warning(f"Keypad: Tecla desconocida {key!r}, ignorando")
            return
        self._latched.add(key)
        if not self._state[key]:
            self._state[key] = True
            logger.debug(f"Keypad: tecla 0x{key:X} pulsada")

    def release(self, key: int) -> None:
        """
        Marca una tecla como soltada.

        Args:
            key: Índice de la tecla (0x0 a 0xF)
        """
        if not 0 <= key < KEY_COUNT:
            logger.warning(f"Keypad: Tecla desconocida {key!r}, ignorando")
            return
        if self._state[key]:
            self._state[key] = False
            logger.debug(f"Keypad: tecla 0x{key:X} soltada")

    def release_all(self) -> None:
        self._state = [False] * KEY_COUNT
        self._latched.clear()

    def is_pressed(self, key: int) -> bool:
        """
        Obtiene el estado actual de una tecla.

        Solo se consideran los 4 bits bajos del índice, igual que hace la CPU
        con el valor de Vx en Ex9E/ExA1.
        """
        return self._state[key & 0xF]

    def snapshot(self) -> tuple[bool, ...]:
        """Copia inmutable del estado de las 16 teclas."""
        return tuple(self._state)

    def sample(self) -> tuple[bool, ...]:
        """
        Snapshot para la CPU: estado actual más las pulsaciones enclavadas.

        Consume las pulsaciones enclavadas, así que una tecla pulsada y soltada
        antes de este muestreo aparece pulsada en esta llamada y soltada en la
        siguiente.
        """
        state = tuple(pressed or key in self._latched for key, pressed in enumerate(self._state))
        self._latched.clear()
        return state
