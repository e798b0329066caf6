"""
Timer - Temporizadores de retardo (DT) y sonido (ST)

La CHIP-8 tiene dos contadores independientes de 8 bits:
- delay (DT): Lo usan los programas para medir tiempo (Fx15 escribe, Fx07 lee)
- sound (ST): Mientras es distinto de cero suena un pitido (Fx18 escribe)

Ambos se decrementan en 1 a una cadencia fija de 60 Hz mientras son distintos
de cero, con suelo en 0 (nunca pasan a negativo ni hacen wrap-around).

Concepto de cadencia:
- La velocidad de ejecución de instrucciones depende del host y no tiene
  relación con los timers. Una instrucción NO equivale a un tick.
- tick() recibe el tiempo real transcurrido (en segundos) y lo acumula.
  Por cada intervalo completo de 1/60 s acumulado se aplica un decremento.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

# Frecuencia de los timers: 60 Hz
TIMER_FREQUENCY_HZ = 60
TIMER_PERIOD_S = 1.0 / TIMER_FREQUENCY_HZ

# Tolerancia para errores de redondeo al acumular fracciones de segundo
_EPSILON = 1e-9


class Timer:
    """
    Par de temporizadores DT/ST.

    El decremento de ambos contadores se aplica en un único paso (step),
    nunca a mitad de una instrucción.
    """

    def __init__(self) -> None:
        """Inicializa ambos contadores a 0 y el acumulador de tiempo vacío."""
        self._delay: int = 0
        self._sound: int = 0
        # Tiempo acumulado que aún no completa un intervalo de 1/60 s
        self._accumulator: float = 0.0
        logger.debug("Timer inicializado (DT=0, ST=0)")

    def tick(self, elapsed: float) -> int:
        """
        Avanza los timers según el tiempo real transcurrido.

        Args:
            elapsed: Segundos transcurridos desde la última llamada

        Returns:
            Número de intervalos de 60 Hz aplicados
        """
        if elapsed <= 0:
            return 0

        self._accumulator += elapsed
        intervals = int(self._accumulator * TIMER_FREQUENCY_HZ + _EPSILON)
        if intervals == 0:
            return 0

        self._accumulator = max(self._accumulator - intervals * TIMER_PERIOD_S, 0.0)
        for _ in range(intervals):
            self.step()
        return intervals

    def step(self) -> None:
        """Aplica un decremento de 60 Hz a ambos contadores (suelo en 0)."""
        if self._delay > 0:
            self._delay -= 1
        if self._sound > 0:
            self._sound -= 1

    def read_delay(self) -> int:
        return self._delay

    def write_delay(self, value: int) -> None:
        """Escribe DT (Fx15). El valor se enmascara a 8 bits."""
        self._delay = value & 0xFF
        logger.debug(f"Timer: DT escrito = {self._delay}")

    def read_sound(self) -> int:
        return self._sound

    def write_sound(self, value: int) -> None:
        """Escribe ST (Fx18). El valor se enmascara a 8 bits."""
        self._sound = value & 0xFF
        logger.debug(f"Timer: ST escrito = {self._sound}")

    @property
    def sound_active(self) -> bool:
        """True mientras el timer de sonido sea distinto de cero."""
        return self._sound > 0
