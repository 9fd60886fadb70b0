import pytest

from sextant.demos import echo_program
from sextant.errors import UnknownRegister
from sextant.interrupts import AWAIT_STRING, OutputInterruption
from sextant.memory import MemoryPatch
from sextant.status import StatusUpdate
from sextant.vm import MiniVM, VMConfig


def _status(**overrides):
    fields = {"registers": tuple(range(32)), "pc": 4, "io_interruption": None, "state": "ready"}
    fields.update(overrides)
    return StatusUpdate(**fields)


def test_register_lookup_by_name():
    status = _status()
    assert status.register("$v0") == 2
    assert status.register("$ra") == 31
    with pytest.raises(UnknownRegister):
        status.register("$nope")


def test_to_dict_shape():
    status = _status(io_interruption=OutputInterruption("hi"), memory_patch=MemoryPatch(3, b"\x01\xff"))
    assert status.to_dict() == {
        "registers": list(range(32)),
        "pc": 4,
        "io_interruption": {"Output": "hi"},
        "state": "ready",
        "memory_patch": {"address": 3, "data": "01ff"},
    }


def test_snapshot_is_detached_from_the_vm():
    vm = MiniVM(VMConfig(memory_size=1024, stack_size=1024))
    vm.load(echo_program())
    before = vm.get_status()
    vm.run()
    after = vm.get_status()
    assert before.pc == 0
    assert before.io_interruption is None
    assert after.io_interruption == AWAIT_STRING
    assert after.register("$v0") == 8
    assert before.register("$v0") == 0


def test_memory_patch_tracks_latest_string_input():
    vm = MiniVM(VMConfig(memory_size=1024, stack_size=1024))
    vm.load(echo_program())
    vm.run()
    assert vm.get_status().memory_patch is None
    vm.handle_input("Bo")
    patch = vm.get_status().memory_patch
    assert patch == MemoryPatch(vm.data_variables["buffer"], b"Bo")
