import pytest

from sextant.errors import UnknownRegister
from sextant.registers import REGISTER_NAMES, REGISTERS, RegisterFile, register_index


def test_register_table_covers_all_slots_in_order():
    assert len(REGISTER_NAMES) == 32
    assert [REGISTERS[name] for name in REGISTER_NAMES] == list(range(32))
    assert register_index("$zero") == 0
    assert register_index("$v0") == 2
    assert register_index("$a0") == 4
    assert register_index("$t8") == 24
    assert register_index("$ra") == 31


def test_unknown_register_name_is_an_error():
    with pytest.raises(UnknownRegister) as excinfo:
        register_index("$t10")
    assert excinfo.value.name == "$t10"
    # Numeric aliases are not part of the table.
    with pytest.raises(UnknownRegister):
        register_index("$2")


def test_register_table_is_read_only():
    with pytest.raises(TypeError):
        REGISTERS["$new"] = 32  # type: ignore[index]


def test_register_file_masks_to_32_bits():
    regs = RegisterFile()
    regs["$t0"] = 0x1_0000_0005
    regs[9] = -1
    assert regs["$t0"] == 5
    assert regs["$t1"] == 0xFFFFFFFF
    assert len(regs.to_tuple()) == 32


def test_zero_register_is_writable():
    regs = RegisterFile()
    regs["$zero"] = 7
    assert regs[0] == 7
