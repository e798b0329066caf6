"""
Tests de integración de la máquina completa (Chip8)

Validan la carga de programas, tick(), el bucle run() con sus tres cadencias,
la cancelación entre instrucciones y la propagación de fallos fatales.
El tiempo se controla con un reloj falso: no hay esperas reales ni ventana.
"""

import pytest

from chip8.errors import MemoryFault, StackUnderflow
from chip8.machine import Chip8
from chip8.memory.mmu import PROGRAM_START


class FakeClock:
    """Reloj que avanza un paso fijo en cada lectura y con sleep()."""

    def __init__(self, step: float = 0.0) -> None:
        self.t = 0.0
        self.step = step
        self.slept = 0.0

    def __call__(self) -> float:
        self.t += self.step
        return self.t

    def sleep(self, seconds: float) -> None:
        self.slept += seconds
        self.t += seconds


class FakeRenderer:
    """Renderer de pruebas: guarda los frames y pide salir tras N lecturas de eventos."""

    def __init__(self, polls_before_quit: int | None = None, tap: tuple | None = None) -> None:
        self.frames = []
        self.events_handled = 0
        self.polls_before_quit = polls_before_quit
        # (número de lectura, tecla): pulsa y suelta la tecla en la misma lectura
        self.tap = tap
        self.closed = False

    def handle_events(self, keypad=None) -> bool:
        self.events_handled += 1
        if self.tap is not None and keypad is not None and self.events_handled == self.tap[0]:
            keypad.press(self.tap[1])
            keypad.release(self.tap[1])
        if self.polls_before_quit is None:
            return True
        return self.events_handled < self.polls_before_quit


    def render_frame(self, frame) -> None:
        self.frames.append(frame)

    def quit(self) -> None:
        self.closed = True


class FakeBeeper:
    def __init__(self) -> None:
        self.states = []

    def update(self, active: bool) -> None:
        self.states.append(active)


def program_bytes(words: list) -> bytes:
    return b"".join(word.to_bytes(2, "big") for word in words)


def make_machine(words: list, **kwargs) -> Chip8:
    kwargs.setdefault("instructions_per_second", None)
    clock = kwargs.pop("fake_clock", FakeClock())
    machine = Chip8(clock=clock, sleep=clock.sleep, **kwargs)
    machine.load_rom(program_bytes(words))
    return machine


class TestLoading:
    """Tests de carga de programas y fuentes"""

    def test_font_loaded_by_default(self) -> None:
        machine = Chip8()
        assert machine.get_memory().read_block(0x050, 5) == bytes([0xF0, 0x90, 0x90, 0x90, 0xF0])

    def test_custom_font(self) -> None:
        font = bytes(range(80))
        machine = Chip8(font=font)
        assert machine.get_memory().read_block(0x050, 80) == font

    def test_custom_font_wrong_size(self) -> None:
        with pytest.raises(ValueError):
            Chip8(font=bytes(10))

    def test_load_rom_from_bytes(self) -> None:
        machine = Chip8()
        assert machine.load_rom(b"\x00\xE0\x12\x00") == 4
        assert machine.get_memory().read_word(PROGRAM_START) == 0x00E0
        assert machine.get_rom() is None

    def test_load_rom_from_file(self, tmp_path) -> None:
        rom_file = tmp_path / "maze.ch8"
        rom_file.write_bytes(program_bytes([0x6001, 0x1202]))
        machine = Chip8(rom_file)
        assert machine.get_rom().name == "maze.ch8"
        assert machine.get_memory().read_word(PROGRAM_START + 2) == 0x1202

    def test_load_rom_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            Chip8(tmp_path / "no_existe.ch8")

    def test_disassemble(self) -> None:
        machine = Chip8()
        machine.load_rom(program_bytes([0x00E0, 0xA22A, 0x1200]))
        assert machine.disassemble(PROGRAM_START, 3) == [
            "0x200: 00E0  CLS",
            "0x202: A22A  LD I, 0x22A",
            "0x204: 1200  JP 0x200",
        ]


class TestTick:
    """Tests de tick()"""

    def test_tick_executes_one_instruction(self) -> None:
        machine = make_machine([0x6A07, 0x7A01])
        machine.tick()
        machine.tick()
        assert machine.registers.get_v(0xA) == 8
        assert machine.registers.get_pc() == 0x204

    def test_tick_advances_timers_with_real_time(self) -> None:
        """Los timers dependen del tiempo transcurrido, no de las instrucciones"""
        clock = FakeClock(step=1 / 60)
        machine = make_machine([0x6A05, 0xFA15, 0x1204], fake_clock=clock)
        machine.tick()
        machine.tick()
        assert machine.get_timer().read_delay() == 5
        for _ in range(5):
            machine.tick()
        assert machine.get_timer().read_delay() == 0


class TestRun:
    """Tests del bucle principal"""

    def test_run_max_instructions(self) -> None:
        machine = make_machine([0x7001, 0x1200])
        executed = machine.run(max_instructions=10)
        assert executed == 10
        assert machine.registers.get_v(0) == 5
        assert not machine.running

    def test_run_should_stop(self) -> None:
        machine = make_machine([0x7001, 0x1200])
        calls = []

        def should_stop() -> bool:
            calls.append(1)
            return machine.registers.get_v(0) >= 3

        machine.run(should_stop=should_stop)
        assert machine.registers.get_v(0) == 3
        assert calls

    def test_stop_from_renderer_events(self) -> None:
        """Cerrar la ventana detiene el bucle en un límite de instrucción"""
        clock = FakeClock(step=0.001)
        machine = make_machine([0x1200], fake_clock=clock)
        renderer = FakeRenderer(polls_before_quit=3)
        machine.attach_renderer(renderer)

        executed = machine.run(max_instructions=100_000)

        assert renderer.events_handled == 3
        assert renderer.closed
        assert executed == 2
        assert machine.registers.get_pc() == 0x200

    def test_input_polled_every_loop_turn(self) -> None:
        """Los eventos se leen en cada vuelta del bucle, no solo al presentar un frame"""
        machine = make_machine([0x1200])
        renderer = FakeRenderer()
        machine.attach_renderer(renderer)

        executed = machine.run(max_instructions=50)

        assert executed == 50
        assert machine.frame_count == 0
        assert renderer.events_handled >= executed

    def test_short_key_tap_completes_key_wait(self) -> None:
        """Una pulsación y suelta dentro de una sola lectura de eventos llega a Fx0A"""
        machine = make_machine([0xF30A, 0x1202])
        renderer = FakeRenderer(tap=(3, 0x5))
        machine.attach_renderer(renderer)

        machine.run(max_instructions=10)

        assert not machine.get_cpu().waiting_for_key
        assert machine.registers.get_v(3) == 0x5
        assert machine.registers.get_pc() == 0x202
        assert not machine.get_keypad().is_pressed(0x5)

    def test_frames_are_read_only_snapshots(self) -> None:
        clock = FakeClock(step=0.001)
        machine = make_machine([0xA050, 0xD005, 0x1204], fake_clock=clock)
        renderer = FakeRenderer()
        machine.attach_renderer(renderer)

        machine.run(max_instructions=200)

        assert renderer.frames
        frame = renderer.frames[-1]
        assert frame.shape == (32, 64)
        assert not frame.flags.writeable
        assert frame[0, 0:4].tolist() == [1, 1, 1, 1]
        assert int(frame.sum()) == machine.get_display().lit_count() == 14

    def test_unchanged_frames_are_not_redrawn(self) -> None:
        """Solo se entrega un frame cuando el framebuffer cambió"""
        clock = FakeClock(step=0.001)
        machine = make_machine([0x1200], fake_clock=clock)
        renderer = FakeRenderer()
        machine.attach_renderer(renderer)
        machine.run(max_instructions=500)
        assert machine.frame_count > 1
        assert len(renderer.frames) == 1

    def test_beeper_follows_sound_timer(self) -> None:
        clock = FakeClock(step=0.001)
        machine = make_machine([0x6A02, 0xFA18, 0x1204], fake_clock=clock)
        beeper = FakeBeeper()
        machine.attach_beeper(beeper)
        machine.run(max_instructions=200)
        assert beeper.states[0] is True
        assert False in beeper.states
        # Al salir del bucle el pitido se apaga
        assert beeper.states[-1] is False

    def test_throttled_run_sleeps(self) -> None:
        """Con un objetivo de 600 ips, 60 instrucciones tardan unos 0.1 s"""
        clock = FakeClock()
        machine = make_machine([0x1200], fake_clock=clock, instructions_per_second=600)
        executed = machine.run(max_instructions=60)
        assert executed == 60
        assert clock.slept > 0
        assert clock.t == pytest.approx(0.1, abs=0.02)


class TestFaults:
    """Tests de los fallos fatales"""

    def test_stack_underflow_stops_run(self) -> None:
        machine = make_machine([0x6001, 0x00EE])
        with pytest.raises(StackUnderflow):
            machine.run()
        assert isinstance(machine.fault, StackUnderflow)
        assert not machine.running
        # Los efectos previos al fallo se conservan
        assert machine.registers.get_v(0) == 1

    def test_memory_fault_on_fetch(self) -> None:
        machine = make_machine([0x1FFF])
        with pytest.raises(MemoryFault):
            machine.run()
        assert machine.registers.get_pc() == 0xFFF

    def test_renderer_closed_after_fault(self) -> None:
        machine = make_machine([0x00EE])
        renderer = FakeRenderer()
        machine.attach_renderer(renderer)
        with pytest.raises(StackUnderflow):
            machine.run()
        assert renderer.closed
