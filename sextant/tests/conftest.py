"""
Pytest configuration and fixtures for sextant tests.
"""
from typing import Any, Dict, Iterable, List

import pytest

from sextant.program import Program, program_from_dict
from sextant.vm import MiniVM, VMConfig


def make_program(statements: List[Dict[str, Any]], data: Iterable[Dict[str, Any]] = (), entrypoint: str = "main") -> Program:
    return program_from_dict(
        {"data": list(data), "text": {"entrypoint": entrypoint, "statements": statements}}
    )


@pytest.fixture
def vm_factory():
    """Build a VM with the given statements already loaded.

    ``statements`` use the compact program-document form and are prefixed
    with a ``main`` label.
    """

    def _build(statements, data=(), **config) -> MiniVM:
        vm = MiniVM(VMConfig(memory_size=config.pop("memory_size", 4096), stack_size=1024, **config))
        vm.load(make_program([{"label": "main"}, *statements], data))
        return vm

    return _build
