"""
Tests del teclado hexadecimal y de las instrucciones que lo leen

Validan:
- press/release/snapshot del Keypad
- Ex9E/ExA1 (SKP/SKNP) usando el nibble bajo de Vx
- Fx0A: suspensión cooperativa hasta una pulsación NUEVA
"""

import logging

from chip8.io.keypad import Keypad
from tests.helpers_cpu import load_program, make_cpu, run_steps


class TestKeypad:
    """Tests del estado del teclado"""

    def test_press_and_release(self) -> None:
        keypad = Keypad()
        keypad.press(0xA)
        assert keypad.is_pressed(0xA)
        assert keypad.snapshot()[0xA] is True
        keypad.release(0xA)
        assert not keypad.is_pressed(0xA)

    def test_snapshot_is_immutable(self) -> None:
        keypad = Keypad()
        snapshot = keypad.snapshot()
        keypad.press(3)
        assert snapshot[3] is False
        assert len(snapshot) == 16

    def test_out_of_range_key_ignored(self, caplog) -> None:
        keypad = Keypad()
        with caplog.at_level(logging.WARNING):
            keypad.press(16)
        assert not any(keypad.snapshot())
        assert "Tecla desconocida" in caplog.text

    def test_release_all(self) -> None:
        keypad = Keypad()
        for key in (1, 5, 0xF):
            keypad.press(key)
        keypad.release_all()
        assert not any(keypad.snapshot())

    def test_short_tap_is_latched_until_sample(self) -> None:
        """Una pulsación soltada antes del muestreo aparece pulsada una sola vez"""
        keypad = Keypad()
        keypad.press(0x7)
        keypad.release(0x7)
        assert not keypad.is_pressed(0x7)
        assert keypad.sample()[0x7] is True
        assert keypad.sample()[0x7] is False

    def test_release_all_clears_latched_presses(self) -> None:
        keypad = Keypad()
        keypad.press(0x3)
        keypad.release_all()
        assert not any(keypad.sample())


class TestSkipOnKey:
    """Tests de Ex9E y ExA1"""

    def test_skp_pressed(self) -> None:
        cpu = make_cpu()
        cpu.keypad.press(0x5)
        load_program(cpu, [0x6105, 0xE19E])
        run_steps(cpu, 2)
        assert cpu.registers.get_pc() == 0x206

    def test_skp_not_pressed(self) -> None:
        cpu = make_cpu()
        load_program(cpu, [0x6105, 0xE19E])
        run_steps(cpu, 2)
        assert cpu.registers.get_pc() == 0x204

    def test_sknp(self) -> None:
        cpu = make_cpu()
        load_program(cpu, [0x6105, 0xE1A1])
        run_steps(cpu, 2)
        assert cpu.registers.get_pc() == 0x206

    def test_key_index_uses_low_nibble(self) -> None:
        """Vx = 0x15 consulta la tecla 0x5"""
        cpu = make_cpu()
        cpu.keypad.press(0x5)
        load_program(cpu, [0x6115, 0xE19E])
        run_steps(cpu, 2)
        assert cpu.registers.get_pc() == 0x206

    def test_skp_sees_short_tap(self) -> None:
        """Ex9E ve una tecla pulsada y soltada entre dos ciclos"""
        cpu = make_cpu()
        load_program(cpu, [0x6105, 0xE19E])
        cpu.step()
        cpu.keypad.press(0x5)
        cpu.keypad.release(0x5)
        cpu.step()
        assert cpu.registers.get_pc() == 0x206


class TestWaitForKey:
    """Tests de Fx0A"""

    def test_suspends_until_press(self) -> None:
        """Mientras no hay pulsación, PC sigue en la instrucción Fx0A"""
        cpu = make_cpu()
        load_program(cpu, [0xF30A, 0x6401])
        cpu.step()
        assert cpu.waiting_for_key
        assert cpu.registers.get_pc() == 0x200

        for _ in range(10):
            assert cpu.step() is None
        assert cpu.registers.get_pc() == 0x200
        assert cpu.registers.get_v(4) == 0

    def test_press_stores_key_and_resumes(self) -> None:
        cpu = make_cpu()
        load_program(cpu, [0xF30A, 0x6401])
        cpu.step()

        cpu.keypad.press(0xB)
        instruction = cpu.step()
        assert instruction is not None
        assert instruction.word == 0xF30A
        assert not cpu.waiting_for_key
        assert cpu.registers.get_v(3) == 0xB
        assert cpu.registers.get_pc() == 0x202

        cpu.step()
        assert cpu.registers.get_v(4) == 1

    def test_key_held_before_wait_is_ignored(self) -> None:
        """Una tecla que ya estaba pulsada no completa la espera"""
        cpu = make_cpu()
        cpu.keypad.press(0x2)
        load_program(cpu, [0xF30A])
        cpu.step()
        run_steps(cpu, 3)
        assert cpu.waiting_for_key

        # Soltar y volver a pulsar sí cuenta
        cpu.keypad.release(0x2)
        cpu.step()
        cpu.keypad.press(0x2)
        cpu.step()
        assert not cpu.waiting_for_key
        assert cpu.registers.get_v(3) == 0x2

    def test_timers_keep_running_while_waiting(self) -> None:
        """La espera no bloquea: el tiempo real sigue decrementando DT"""
        cpu = make_cpu()
        cpu.timer.write_delay(3)
        load_program(cpu, [0xF00A])
        cpu.step()
        for _ in range(3):
            cpu.timer.tick(1 / 60)
            cpu.step()
        assert cpu.timer.read_delay() == 0
        assert cpu.waiting_for_key
