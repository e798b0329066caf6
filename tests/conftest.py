"""
Configuración global de pytest para Chip8 VM

Este archivo configura el entorno de testing para evitar bloqueos:
- Configura pygame en modo headless (sin ventanas ni audio)
- Agrega la raíz del proyecto al sys.path
"""

import os
import sys
from pathlib import Path

# Agregar el directorio raíz al sys.path para importar módulos
project_root = Path(__file__).parent.parent.absolute()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Configurar pygame en modo headless (sin ventanas) para evitar bloqueos
# Esto previene que los tests abran ventanas gráficas que bloqueen pytest
os.environ['SDL_VIDEODRIVER'] = 'dummy'
os.environ['SDL_AUDIODRIVER'] = 'dummy'
os.environ['PYGAME_HIDE_SUPPORT_PROMPT'] = '1'
