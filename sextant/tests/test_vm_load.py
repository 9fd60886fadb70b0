import pytest

from sextant.demos import sum_program
from sextant.errors import ConfigurationError, EntrypointNotFound, LoadError, VMError
from sextant.program import Instruction, Label, Program, Variable
from sextant.vm import MiniVM, VMConfig, VMState, search_entrypoint


@pytest.mark.parametrize(
    "memory_size, stack_size",
    [(1000, 1024), (1024, 1000), (0, 1024), (1024, 0), (3, 3)],
)
def test_capacities_must_be_powers_of_two(memory_size, stack_size):
    with pytest.raises(ConfigurationError) as excinfo:
        MiniVM(VMConfig(memory_size=memory_size, stack_size=stack_size))
    assert "power of 2" in str(excinfo.value)


def test_negative_step_delay_is_rejected():
    with pytest.raises(ConfigurationError):
        MiniVM(VMConfig(step_delay=-1))


def test_fresh_vm_is_unloaded_and_zeroed():
    vm = MiniVM(VMConfig(memory_size=64, stack_size=64))
    status = vm.get_status()
    assert status.state == "unloaded"
    assert status.registers == (0,) * 32
    assert status.pc == 0
    assert status.io_interruption is None
    assert vm.read_mem(0, 64) == bytes(64)
    with pytest.raises(VMError):
        vm.step()
    with pytest.raises(VMError):
        vm.run()


def test_load_positions_pc_at_entry_label():
    program = Program(
        variables=(Variable("msg", "asciiz", "hi"),),
        statements=(Label("helper"), Instruction("syscall"), Label("start"), Instruction("syscall")),
        entrypoint="start",
    )
    vm = MiniVM(VMConfig(memory_size=64, stack_size=64))
    vm.load(program)
    assert vm.pc == 2
    assert vm.state is VMState.READY
    assert vm.data_variables == {"msg": 0}
    assert vm.read_mem(0, 3) == b"hi\x00"


def test_first_matching_label_wins():
    statements = (Label("main"), Label("main"))
    assert search_entrypoint("main", statements) == 0


def test_missing_entrypoint_fails_and_leaves_text_empty():
    vm = MiniVM(VMConfig(memory_size=64, stack_size=64))
    with pytest.raises(EntrypointNotFound) as excinfo:
        vm.load(Program(statements=(Label("start"),), entrypoint="main"))
    assert str(excinfo.value) == "entrypoint not found: main"
    assert vm.statements == ()


def test_vm_accepts_a_single_load():
    vm = MiniVM(VMConfig(memory_size=64, stack_size=64))
    vm.load(sum_program())
    with pytest.raises(LoadError):
        vm.load(sum_program())


def test_failed_load_leaves_vm_unusable():
    vm = MiniVM(VMConfig(memory_size=64, stack_size=64))
    with pytest.raises(LoadError):
        vm.load(Program(statements=(Label("other"),)))
    with pytest.raises(LoadError):
        vm.load(sum_program())
