import pytest

from sextant.errors import MalformedInstruction, OpcodeNotImplemented, UnknownDataVariable, UnknownRegister
from sextant.opcodes import IMPLEMENTED, MNEMONICS, OPCODES
from sextant.program import Immediate, Instruction, Register
from sextant.vm import VMState


def _run_all(vm):
    while vm.step():
        pass
    return vm.get_status()


def test_li_loads_immediate_with_wraparound(vm_factory):
    vm = vm_factory([{"op": "li", "args": ["$t0", 7]}, {"op": "li", "args": ["$t1", -1]}])
    status = _run_all(vm)
    assert status.register("$t0") == 7
    assert status.register("$t1") == 0xFFFFFFFF
    assert status.state == "finished"
    assert status.pc == 3


def test_labels_execute_as_no_ops(vm_factory):
    vm = vm_factory([{"label": "again"}])
    assert vm.step() is True
    assert vm.pc == 0
    assert vm.step() is True
    assert vm.pc == 2
    assert vm.registers.to_tuple() == (0,) * 32
    assert vm.step() is False


def test_la_loads_data_variable_offset(vm_factory):
    vm = vm_factory(
        [{"op": "la", "args": ["$a0", "second"]}],
        data=[{"name": "first", "type": "asciiz", "value": "abcd"}, {"name": "second", "type": "asciiz", "value": "x"}],
    )
    assert _run_all(vm).register("$a0") == 4


def test_la_of_text_label_is_unknown_data_variable(vm_factory):
    vm = vm_factory([{"op": "la", "args": ["$a0", "main"]}])
    vm.step()
    with pytest.raises(UnknownDataVariable) as excinfo:
        vm.step()
    assert excinfo.value.name == "main"


def test_move_copies_register(vm_factory):
    vm = vm_factory([{"op": "li", "args": ["$t0", 99]}, {"op": "move", "args": ["$s0", "$t0"]}])
    status = _run_all(vm)
    assert status.register("$s0") == 99
    assert status.register("$t0") == 99


def test_add_wraps_modulo_two_to_the_32(vm_factory):
    vm = vm_factory(
        [
            {"op": "li", "args": ["$t0", 4294967295]},
            {"op": "li", "args": ["$t1", 1]},
            {"op": "add", "args": ["$t2", "$t0", "$t1"]},
            {"op": "li", "args": ["$t3", 3]},
            {"op": "li", "args": ["$t4", 4]},
            {"op": "add", "args": ["$t5", "$t3", "$t4"]},
        ]
    )
    status = _run_all(vm)
    assert status.register("$t2") == 0
    assert status.register("$t5") == 7


def test_add_may_target_one_of_its_sources(vm_factory):
    vm = vm_factory([{"op": "li", "args": ["$t0", 5]}, {"op": "add", "args": ["$t0", "$t0", "$t0"]}])
    assert _run_all(vm).register("$t0") == 10


def test_zero_register_is_not_hardwired(vm_factory):
    vm = vm_factory([{"op": "li", "args": ["$zero", 1]}])
    assert _run_all(vm).register("$zero") == 1


@pytest.mark.parametrize(
    "statement",
    [
        {"op": "sub", "args": ["$t0", "$t1", "$t2"]},
        {"op": "addi", "args": ["$t0", "$t1", 1]},
        {"op": "andi", "args": ["$t0", "$t1", 1]},
        {"op": "beq", "args": ["$t0", "$t1", "main"]},
        {"op": "j", "args": ["main"]},
        {"op": "jal", "args": ["main"]},
        {"op": "jr", "args": ["$ra"]},
    ],
)
def test_unimplemented_opcodes_fail_without_poisoning_the_vm(vm_factory, statement):
    vm = vm_factory([statement, {"op": "li", "args": ["$t0", 1]}])
    vm.step()
    with pytest.raises(OpcodeNotImplemented) as excinfo:
        vm.step()
    assert excinfo.value.opcode == statement["op"]
    # The counter already moved past the failing statement.
    assert vm.pc == 2
    assert vm.state is VMState.READY
    assert vm.step() is True
    assert vm.registers["$t0"] == 1


def test_unknown_register_reaches_the_caller(vm_factory):
    vm = vm_factory([{"op": "li", "args": ["$t99", 1]}])
    vm.step()
    with pytest.raises(UnknownRegister):
        vm.step()
    assert vm.pc == 2


def test_malformed_argument_shapes_are_rejected(vm_factory):
    vm = vm_factory([{"op": "li", "args": ["$t0", "$t1"]}, {"op": "syscall", "args": [1]}])
    vm.step()
    with pytest.raises(MalformedInstruction) as excinfo:
        vm.step()
    assert "li expects (register, immediate)" in str(excinfo.value)
    with pytest.raises(MalformedInstruction):
        vm.step()
    assert vm.state is VMState.FINISHED


def test_execute_runs_a_single_instruction_directly(vm_factory):
    vm = vm_factory([])
    vm.execute(Instruction("li", (Register("$v1"), Immediate(12))))
    assert vm.registers["$v1"] == 12
    assert vm.pc == 0


def test_every_mnemonic_outside_the_subset_is_stubbed():
    assert set(MNEMONICS) - IMPLEMENTED == {"sub", "addi", "andi", "beq", "j", "jal", "jr"}
    assert IMPLEMENTED <= set(OPCODES)


def test_dispatch_table_follows_the_implemented_subset(vm_factory):
    vm = vm_factory([])
    for mnemonic in MNEMONICS:
        handler = vm._dispatch[mnemonic]
        if mnemonic in IMPLEMENTED:
            assert handler == getattr(vm, f"_op_{mnemonic}")
        else:
            assert handler == vm._op_not_implemented
