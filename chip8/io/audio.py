"""
Audio - Pitido del timer de sonido

La CHIP-8 solo tiene un tono: mientras el timer de sonido (ST) es distinto de
cero suena un pitido, y se calla cuando llega a 0. La máquina llama a
Beeper.update() una vez por frame con el estado del timer.

La onda cuadrada se genera con numpy y se reproduce en bucle con pygame.mixer.
Si no hay dispositivo de audio (servidores, CI), el Beeper queda desactivado y
update() no hace nada.
"""

from __future__ import annotations

import logging

import numpy as np
import pygame

logger = logging.getLogger(__name__)

SAMPLE_RATE = 22050
TONE_HZ = 440
VOLUME = 0.25


def square_wave(frequency: int = TONE_HZ, sample_rate: int = SAMPLE_RATE, volume: float = VOLUME) -> np.ndarray:
    """
    Genera un periodo exacto de onda cuadrada en int16 (mono).

    Un solo periodo es suficiente: pygame lo reproduce en bucle.
    """
    period = max(sample_rate // frequency, 2)
    amplitude = int(32767 * volume)
    wave = np.full(period, amplitude, dtype=np.int16)
    wave[period // 2:] = -amplitude
    return wave


class Beeper:
    """Salida de audio del timer de sonido."""

    def __init__(self, frequency: int = TONE_HZ) -> None:
        self._sound: pygame.mixer.Sound | None = None
        self._playing: bool = False

        try:
            pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1)
        except pygame.error as e:
            logger.warning(f"Audio no disponible, pitido desactivado: {e}")
            return

        _, _, channels = pygame.mixer.get_init()
        wave = square_wave(frequency)
        if channels > 1:
            # El mixer puede abrir más canales de los pedidos: duplicar la onda
            wave = np.repeat(wave[:, np.newaxis], channels, axis=1)
        self._sound = pygame.sndarray.make_sound(np.ascontiguousarray(wave))
        logger.info(f"Audio inicializado: {frequency} Hz, {channels} canal(es)")

    @property
    def enabled(self) -> bool:
        return self._sound is not None

    @property
    def playing(self) -> bool:
        return self._playing

    def update(self, active: bool) -> None:
        """
        Sincroniza el pitido con el estado del timer de sonido.

        Args:
            active: True mientras ST sea distinto de cero
        """
        if self._sound is None or active == self._playing:
            return
        if active:
            self._sound.play(loops=-1)
        else:
            self._sound.stop()
        self._playing = active

    def quit(self) -> None:
        if self._sound is not None:
            self._sound.stop()
            pygame.mixer.quit()
            self._sound = None
            self._playing = False
