"""Tests for fetch, step, timers and program loading."""

import pytest
from chip8vm import (
    create_state, decode, fetch, load_rom, load_program, run_frame, step, tick_timers,
    LoadError, Op, OutOfBounds, UnknownOpcode, MEMORY_SIZE, PROGRAM_START,
)
from chip8vm.emulator import HANDLERS
from chip8vm.state import set_pc
from conftest import program, state_with_program


class TestFetch:
    """Test instruction fetch."""

    def test_fetch_is_big_endian(self):
        state = state_with_program(0x12AB)

        state, instruction = fetch(state)

        assert instruction == 0x12AB
        assert state.pc == PROGRAM_START + 2

    def test_fetch_at_last_byte_fails(self, fresh_state):
        state = set_pc(fresh_state, MEMORY_SIZE - 1)
        with pytest.raises(OutOfBounds) as excinfo:
            fetch(state)
        assert excinfo.value.address == MEMORY_SIZE - 1

    def test_fetch_fault_reports_trailing_byte(self, fresh_state):
        state = fresh_state.replace(memory=fresh_state.memory.at[MEMORY_SIZE - 1].set(0xAB))
        state = set_pc(state, MEMORY_SIZE - 1)
        with pytest.raises(OutOfBounds) as excinfo:
            fetch(state)
        assert excinfo.value.data == b"\xab"
        assert "0x0FFF" in str(excinfo.value)
        assert "read AB" in str(excinfo.value)

    def test_fetch_at_last_word(self, fresh_state):
        state = set_pc(fresh_state, MEMORY_SIZE - 2)
        state, instruction = fetch(state)
        assert instruction == 0x0000


class TestDecode:
    """Test the decoder."""

    def test_every_op_has_a_handler(self):
        assert set(HANDLERS) == set(Op)

    @pytest.mark.parametrize("instruction,op", [
        (0x00E0, Op.CLS), (0x00EE, Op.RET), (0x1234, Op.JP), (0x2234, Op.CALL),
        (0x3A12, Op.SE_IMM), (0x4A12, Op.SNE_IMM), (0x5AB0, Op.SE_REG),
        (0x6A12, Op.LD_IMM), (0x7A12, Op.ADD_IMM), (0x8AB0, Op.LD_REG),
        (0x8AB1, Op.OR), (0x8AB2, Op.AND), (0x8AB3, Op.XOR), (0x8AB4, Op.ADD_REG),
        (0x8AB5, Op.SUB), (0x8AB6, Op.SHR), (0x8AB7, Op.SUBN), (0x8ABE, Op.SHL),
        (0x9AB0, Op.SNE_REG), (0xA123, Op.LD_INDEX), (0xB123, Op.JP_V0),
        (0xCA12, Op.RND), (0xDAB5, Op.DRW), (0xEA9E, Op.SKP), (0xEAA1, Op.SKNP),
        (0xFA07, Op.LD_VX_DT), (0xFA0A, Op.LD_VX_K), (0xFA15, Op.LD_DT_VX),
        (0xFA18, Op.LD_ST_VX), (0xFA1E, Op.ADD_INDEX), (0xFA29, Op.LD_FONT),
        (0xFA33, Op.LD_BCD), (0xFA55, Op.LD_MEM_VX), (0xFA65, Op.LD_VX_MEM),
    ])
    def test_decode_ops(self, instruction, op):
        assert decode(instruction).op == op

    def test_decode_operands(self):
        decoded = decode(0xD5A7)
        assert decoded.x == 0x5
        assert decoded.y == 0xA
        assert decoded.n == 0x7
        assert decoded.nn == 0xA7
        assert decoded.nnn == 0x5A7

    @pytest.mark.parametrize("instruction", [0x0000, 0x0123, 0x5121, 0x9AB1, 0x8AB8, 0xE000, 0xF000, 0xFFFF])
    def test_decode_unknown(self, instruction):
        with pytest.raises(UnknownOpcode) as excinfo:
            decode(instruction, 0x2A0)
        assert excinfo.value.instruction == instruction
        assert excinfo.value.address == 0x2A0


class TestStep:
    """Test full fetch-decode-execute cycles."""

    def test_add_program(self):
        state = state_with_program(0x6005, 0x6103, 0x8014)
        for _ in range(3):
            state = step(state)

        assert state.V[0] == 8
        assert state.V[15] == 0
        assert state.pc == PROGRAM_START + 6

    def test_subtract_program_with_borrow(self):
        state = state_with_program(0x600A, 0x61FB, 0x8015)
        for _ in range(3):
            state = step(state)

        assert state.V[0] == (10 - 251) % 256
        assert state.V[0] == 15
        assert state.V[15] == 0

    def test_unknown_opcode_is_skipped(self, capsys):
        state = state_with_program(0xFFFF, 0x6005)

        state = step(state)
        assert state.pc == PROGRAM_START + 2
        assert "Unknown opcode 0xFFFF" in capsys.readouterr().err

        state = step(state)
        assert state.V[0] == 5
        assert state.pc == PROGRAM_START + 4

    def test_unknown_opcode_reports_address(self, capsys):
        state = state_with_program(0x6001, 0x0123)
        state = step(step(state))
        assert "at 0x202" in capsys.readouterr().err

    def test_call_and_return_program(self):
        # 0x200: CALL 0x206; 0x202: V1 = 1; 0x204: JP 0x204; 0x206: V0 = 7; 0x208: RET
        state = state_with_program(0x2206, 0x6101, 0x1204, 0x6007, 0x00EE)

        state = step(state)
        assert state.pc == 0x206
        state = step(step(state))
        assert state.pc == PROGRAM_START + 2
        state = step(state)

        assert state.V[0] == 7
        assert state.V[1] == 1
        assert state.stack.pointer == 0

    def test_skip_in_program(self):
        # V0 = 1; skip if V0 == 1; V1 = 0xBB (skipped); V2 = 0xCC
        state = state_with_program(0x6001, 0x3001, 0x61BB, 0x62CC)
        for _ in range(3):
            state = step(state)

        assert state.V[1] == 0
        assert state.V[2] == 0xCC

    def test_wait_for_key_reexecutes(self):
        from chip8vm import press_key, release_key

        state = state_with_program(0xF20A, 0x6301)
        state = step(state)
        state = step(state)
        assert state.pc == PROGRAM_START

        state = release_key(press_key(state, 0xE), 0xE)
        state = step(state)
        assert state.pc == PROGRAM_START + 2
        assert state.V[2] == 0xE

    def test_consecutive_waits_need_separate_releases(self):
        from chip8vm import press_key, release_key

        # V0 = 0; wait into V1; wait into V2; spin
        state = state_with_program(0x6000, 0xF10A, 0xF20A, 0x1206)
        state = release_key(press_key(state, 0x5), 0x5)
        for _ in range(4):
            state = step(state)

        assert state.V[1] == 0x5
        assert state.V[2] == 0
        assert state.pc == PROGRAM_START + 4

        state = release_key(press_key(state, 0xA), 0xA)
        state = step(state)
        assert state.V[2] == 0xA
        assert state.pc == PROGRAM_START + 6

    def test_out_of_bounds_access_propagates(self):
        state = state_with_program(0xAFFF, 0xF155)
        state = step(state)
        with pytest.raises(OutOfBounds):
            step(state)

    def test_jump_out_of_memory_faults_on_fetch(self):
        state = state_with_program(0x60FF, 0xBFFF)
        state = step(step(state))
        assert state.pc == 0x10FE
        with pytest.raises(OutOfBounds):
            step(state)


class TestTimers:
    """Test timer countdown."""

    def test_tick_timers(self, fresh_state):
        state = fresh_state.replace(delay_timer=fresh_state.delay_timer + 2, sound_timer=fresh_state.sound_timer + 1)

        state = tick_timers(state)
        assert state.delay_timer == 1
        assert state.sound_timer == 0

        state = tick_timers(state)
        assert state.delay_timer == 0
        assert state.sound_timer == 0

    def test_run_frame(self):
        # V0 = 3; DT = V0; then spin on JP 0x204
        state = state_with_program(0x6003, 0xF015, 0x1204)

        state = run_frame(state, 10)

        assert state.pc == 0x204
        assert state.delay_timer == 2

    def test_run_frame_timer_ticks(self):
        state = state_with_program(0x6005, 0xF015, 0x1204)

        state = run_frame(state, 3, timer_ticks=0)
        assert state.delay_timer == 5

        state = run_frame(state, 1, timer_ticks=3)
        assert state.delay_timer == 2


class TestLoading:
    """Test program loading."""

    def test_program_placed_at_0x200(self):
        state = create_state(program=b"\x12\x34\x56")
        assert [int(b) for b in state.memory[0x200:0x204]] == [0x12, 0x34, 0x56, 0x00]
        assert state.pc == PROGRAM_START

    def test_font_loaded(self, fresh_state):
        assert [int(b) for b in fresh_state.memory[0:5]] == [0xF0, 0x90, 0x90, 0x90, 0xF0]
        assert [int(b) for b in fresh_state.memory[75:80]] == [0xF0, 0x80, 0xF0, 0x80, 0x80]

    def test_largest_program_fits(self, fresh_state):
        state = load_program(fresh_state, bytes([0xAB]) * (MEMORY_SIZE - PROGRAM_START))
        assert state.memory[MEMORY_SIZE - 1] == 0xAB

    def test_program_too_large(self, fresh_state):
        with pytest.raises(LoadError):
            load_program(fresh_state, bytes(MEMORY_SIZE - PROGRAM_START + 1))

    def test_load_rom(self, fresh_state, tmp_path):
        rom = tmp_path / "test.ch8"
        rom.write_bytes(program(0x6042, 0x1202))

        state = step(load_rom(fresh_state, str(rom)))

        assert state.V[0] == 0x42

    def test_load_missing_rom(self, fresh_state, tmp_path):
        with pytest.raises(LoadError):
            load_rom(fresh_state, str(tmp_path / "missing.ch8"))
