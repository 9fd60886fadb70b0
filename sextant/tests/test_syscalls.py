import pytest

from sextant.errors import (
    InterruptionAlreadyPending,
    InvalidInputFormat,
    InvalidResumption,
    MemoryFault,
    UnhandledSyscall,
)
from sextant.interrupts import (
    AWAIT_NUMBER,
    AWAIT_STRING,
    HALT,
    InterruptionController,
    OutputInterruption,
    parse_u32,
)
from sextant.memory import Memory, MemoryPatch
from sextant.registers import RegisterFile
from sextant.vm import VMState


def _syscall(code, *extra):
    return [*extra, {"op": "li", "args": ["$v0", code]}, {"op": "syscall"}]


def _step_all(vm):
    while vm.step():
        if vm.io_interruption is not None:
            break
    return vm.get_status()


def test_print_int_emits_decimal_text(vm_factory):
    vm = vm_factory(_syscall(1, {"op": "li", "args": ["$a0", 42]}))
    status = _step_all(vm)
    assert status.io_interruption == OutputInterruption("42")
    assert vm.output == ["42"]


def test_print_int_is_unsigned(vm_factory):
    vm = vm_factory(_syscall(1, {"op": "li", "args": ["$a0", -1]}))
    assert _step_all(vm).io_interruption == OutputInterruption("4294967295")


def test_print_string_reads_up_to_terminator(vm_factory):
    vm = vm_factory(
        _syscall(4, {"op": "la", "args": ["$a0", "msg"]}),
        data=[{"name": "msg", "type": "asciiz", "value": "Sum: "}],
    )
    status = _step_all(vm)
    assert status.io_interruption == OutputInterruption("Sum: ")
    assert status.register("$a0") == 0


def test_read_int_suspends_until_input(vm_factory):
    vm = vm_factory(_syscall(5))
    status = _step_all(vm)
    assert status.io_interruption == AWAIT_NUMBER
    assert status.state == "suspended"
    assert vm.step() is False
    vm.handle_input("42")
    status = vm.get_status()
    assert status.register("$v0") == 42
    assert status.io_interruption is None
    assert status.state == "finished"


def test_bad_number_keeps_the_request_pending(vm_factory):
    vm = vm_factory(_syscall(5))
    _step_all(vm)
    with pytest.raises(InvalidInputFormat):
        vm.handle_input("abc")
    assert vm.io_interruption == AWAIT_NUMBER
    vm.handle_input(" 7\n")
    assert vm.registers["$v0"] == 7


def test_read_string_writes_at_a0_and_records_patch(vm_factory):
    vm = vm_factory(
        _syscall(8, {"op": "la", "args": ["$a0", "buf"]}),
        data=[{"name": "pad", "type": "asciiz", "value": "ab"}, {"name": "buf", "type": "asciiz", "value": "\u0000"}],
    )
    status = _step_all(vm)
    assert status.io_interruption == AWAIT_STRING
    vm.handle_input("hey")
    status = vm.get_status()
    assert status.memory_patch == MemoryPatch(2, b"hey")
    assert vm.read_mem(0, 6) == b"abhey\x00"
    # Registers are untouched by string input.
    assert status.register("$v0") == 8


def test_exit_halts_for_good(vm_factory):
    vm = vm_factory([*_syscall(10), {"op": "li", "args": ["$t0", 1]}])
    status = _step_all(vm)
    assert status.io_interruption == HALT
    assert status.state == "halted"
    pc = vm.pc
    assert vm.step() is False
    assert vm.run() == 0
    assert vm.pc == pc
    assert vm.registers["$t0"] == 0
    with pytest.raises(InvalidResumption):
        vm.handle_input("1")


def test_unhandled_syscall_code(vm_factory):
    vm = vm_factory(_syscall(99))
    vm.step()
    vm.step()
    with pytest.raises(UnhandledSyscall) as excinfo:
        vm.step()
    assert excinfo.value.code == 99
    assert str(excinfo.value) == "unhandled syscall code: 99"
    assert vm.io_interruption is None


def test_input_without_request_is_rejected(vm_factory):
    vm = vm_factory(_syscall(1))
    with pytest.raises(InvalidResumption):
        vm.handle_input("1")
    status = _step_all(vm)
    assert isinstance(status.io_interruption, OutputInterruption)
    with pytest.raises(InvalidResumption):
        vm.handle_input("1")


def test_controller_holds_a_single_interruption():
    controller = InterruptionController(RegisterFile(), Memory(16))
    controller.raise_interruption(AWAIT_NUMBER)
    with pytest.raises(InterruptionAlreadyPending):
        controller.raise_interruption(OutputInterruption("x"))
    assert controller.pending == AWAIT_NUMBER
    assert controller.acknowledge_output() is None
    assert controller.pending == AWAIT_NUMBER


def test_controller_acknowledges_output():
    controller = InterruptionController(RegisterFile(), Memory(16))
    controller.raise_interruption(OutputInterruption("hi"))
    assert controller.acknowledge_output() == "hi"
    assert controller.pending is None
    assert controller.transcript == ["hi"]


@pytest.mark.parametrize("text, expected", [("0", 0), ("4294967295", 4294967295), ("  12 ", 12)])
def test_parse_u32_accepts(text, expected):
    assert parse_u32(text) == expected


@pytest.mark.parametrize("text", ["", "-1", "+1", "4294967296", "1.5", "0x10", "١٢"])
def test_parse_u32_rejects(text):
    with pytest.raises(InvalidInputFormat):
        parse_u32(text)


def test_vm_state_after_halt_is_reported(vm_factory):
    vm = vm_factory(_syscall(10))
    vm.run()
    assert vm.state is VMState.HALTED


def test_string_input_outside_memory_faults_and_stays_pending(vm_factory):
    vm = vm_factory(_syscall(8, {"op": "li", "args": ["$a0", 5000]}))
    _step_all(vm)
    with pytest.raises(MemoryFault):
        vm.handle_input("late")
    assert vm.io_interruption == AWAIT_STRING
    assert vm.get_status().memory_patch is None
