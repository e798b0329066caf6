"""
Tests unitarios para control de flujo de la CPU

Valida:
- 1nnn (JP): salto absoluto, independiente del PC previo
- 2nnn/00EE (CALL/RET): ida y vuelta, pila vacía y pila llena
- Bnnn (JP V0): salto con desplazamiento
- Saltos condicionales 3xkk, 4xkk, 5xy0, 9xy0
"""

import pytest

from chip8.errors import MemoryFault, StackOverflow, StackUnderflow
from tests.helpers_cpu import load_program, make_cpu, run_steps


class TestJump:
    """Tests para 1nnn (JP addr)"""

    @pytest.mark.parametrize("target", [0x000, 0x200, 0x2A4, 0xFFE])
    def test_jump_sets_pc_exactly(self, target: int) -> None:
        """JP escribe el destino de 12 bits tal cual"""
        cpu = make_cpu()
        load_program(cpu, [0x1000 | target], start_addr=0x300)
        cpu.step()
        assert cpu.registers.get_pc() == target, (
            f"PC debe ser 0x{target:03X} después de JP, es 0x{cpu.registers.get_pc():03X}"
        )

    def test_jump_to_self(self) -> None:
        """Un salto a sí mismo deja PC en la misma instrucción (bucle infinito)"""
        cpu = make_cpu()
        load_program(cpu, [0x1200])
        run_steps(cpu, 5)
        assert cpu.registers.get_pc() == 0x200

    def test_jump_with_v0(self) -> None:
        """Bnnn: PC = nnn + V0"""
        cpu = make_cpu()
        load_program(cpu, [0x6010, 0xB300])
        run_steps(cpu, 2)
        assert cpu.registers.get_pc() == 0x310

    def test_jump_with_v0_out_of_memory(self) -> None:
        """Bnnn puede apuntar más allá de 0xFFF: el siguiente fetch falla"""
        cpu = make_cpu()
        load_program(cpu, [0x60FF, 0xBFFF])
        run_steps(cpu, 2)
        assert cpu.registers.get_pc() == 0x10FE
        with pytest.raises(MemoryFault):
            cpu.step()


class TestCallReturn:
    """Tests para 2nnn (CALL) y 00EE (RET)"""

    def test_call_pushes_advanced_pc(self) -> None:
        """CALL apila la dirección de la instrucción siguiente"""
        cpu = make_cpu()
        load_program(cpu, [0x2300])
        cpu.step()
        assert cpu.registers.get_pc() == 0x300
        assert cpu.stack.snapshot() == (0x202,)

    def test_call_return_round_trip(self) -> None:
        """CALL seguido de RET devuelve el PC al valor tras el fetch del CALL"""
        cpu = make_cpu()
        load_program(cpu, [0x2300, 0x6101])
        load_program(cpu, [0x00EE], start_addr=0x300)
        cpu.registers.set_pc(0x200)

        cpu.step()  # CALL 0x300
        cpu.step()  # RET
        assert cpu.registers.get_pc() == 0x202
        assert len(cpu.stack) == 0

        cpu.step()  # LD V1, 0x01
        assert cpu.registers.get_v(1) == 1

    def test_nested_calls(self) -> None:
        """Las llamadas anidadas vuelven en orden LIFO"""
        cpu = make_cpu()
        load_program(cpu, [0x2300])
        load_program(cpu, [0x2400, 0x00EE], start_addr=0x300)
        load_program(cpu, [0x00EE], start_addr=0x400)
        cpu.registers.set_pc(0x200)

        run_steps(cpu, 2)
        assert cpu.stack.snapshot() == (0x202, 0x302)
        cpu.step()
        assert cpu.registers.get_pc() == 0x302
        cpu.step()
        assert cpu.registers.get_pc() == 0x202

    def test_return_on_empty_stack(self) -> None:
        """RET con la pila vacía lanza StackUnderflow y PC no cambia más"""
        cpu = make_cpu()
        load_program(cpu, [0x00EE])
        with pytest.raises(StackUnderflow):
            cpu.step()
        assert cpu.registers.get_pc() == 0x202

    def test_stack_overflow(self) -> None:
        """Una llamada con la pila llena lanza StackOverflow"""
        cpu = make_cpu(stack_capacity=2)
        load_program(cpu, [0x2200])  # Recursión infinita
        run_steps(cpu, 2)
        with pytest.raises(StackOverflow):
            cpu.step()
        assert len(cpu.stack) == 2

    def test_unbounded_stack(self) -> None:
        """Con capacity=None la pila no tiene límite"""
        cpu = make_cpu(stack_capacity=None)
        load_program(cpu, [0x2200])
        run_steps(cpu, 100)
        assert len(cpu.stack) == 100


class TestSkips:
    """Tests para los saltos condicionales"""

    @pytest.mark.parametrize(
        "program, expected_pc",
        [
            ([0x6A12, 0x3A12], 0x206),  # SE Vx, kk (igual -> salta)
            ([0x6A12, 0x3A13], 0x204),  # SE Vx, kk (distinto -> no salta)
            ([0x6A12, 0x4A13], 0x206),  # SNE Vx, kk (distinto -> salta)
            ([0x6A12, 0x4A12], 0x204),  # SNE Vx, kk (igual -> no salta)
        ],
    )
    def test_skip_immediate(self, program: list, expected_pc: int) -> None:
        cpu = make_cpu()
        load_program(cpu, program)
        run_steps(cpu, 2)
        assert cpu.registers.get_pc() == expected_pc

    @pytest.mark.parametrize(
        "vy, opcode, expected_pc",
        [
            (0x05, 0x5120, 0x208),  # SE V1, V2 (iguales -> salta)
            (0x06, 0x5120, 0x206),  # SE V1, V2 (distintos -> no salta)
            (0x06, 0x9120, 0x208),  # SNE V1, V2 (distintos -> salta)
            (0x05, 0x9120, 0x206),  # SNE V1, V2 (iguales -> no salta)
        ],
    )
    def test_skip_registers(self, vy: int, opcode: int, expected_pc: int) -> None:
        cpu = make_cpu()
        load_program(cpu, [0x6105, 0x6200 | vy, opcode])
        run_steps(cpu, 3)
        assert cpu.registers.get_pc() == expected_pc
