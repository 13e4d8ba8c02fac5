"""
Tests for the built-in library catalog.
"""
import pytest

from turing_lang.backend.library_registry import (
    BUILTIN_LIBRARIES, SUM, Library, LibraryRegistry, get_registry,
)
from turing_lang.internals.diagnostics import LibraryError
from turing_lang.semantics.instruction import Instruction, Movement

from conftest import machine_of


def _library(code, used=("q0", "q1")):
    return Library(
        name="broken",
        description="test",
        initial_state="q0",
        final_state="q1",
        used_states=frozenset(used),
        code=code,
    )


# ═══════════════════════════════════════════
# Registry
# ═══════════════════════════════════════════

class TestRegistry:
    def test_names(self):
        assert get_registry().names() == ["sum", "double", "mod2", "div2", "monus"]

    def test_lookup_is_exact(self):
        registry = get_registry()
        assert registry.get_library("sum") is SUM
        assert registry.get_library("SUM") is None
        assert registry.get_library("su") is None
        assert "sum" in registry
        assert "product" not in registry

    def test_read_only(self):
        with pytest.raises(TypeError):
            get_registry().get_all_libraries()["extra"] = SUM

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="duplicate library name 'sum'"):
            LibraryRegistry([SUM, SUM])

    def test_builtins_validate(self):
        LibraryRegistry(BUILTIN_LIBRARIES).validate()

    def test_validate_rejects_undeclared_state(self):
        registry = LibraryRegistry([_library("(q0, 1, 0, R, q9);")])
        with pytest.raises(LibraryError, match="undeclared state"):
            registry.validate()

    def test_validate_rejects_empty_library(self):
        registry = LibraryRegistry([_library("// nothing here")])
        with pytest.raises(LibraryError, match="no instructions"):
            registry.validate()

    def test_malformed_code(self):
        with pytest.raises(LibraryError) as info:
            _library("(q0, 1").get_instructions()
        assert info.value.error_code == "CE0001"
        assert "broken" in info.value.message


# ═══════════════════════════════════════════
# Library instructions
# ═══════════════════════════════════════════

class TestInstructions:
    def test_sum_table(self):
        rules = SUM.get_instructions()
        assert len(rules) == 4
        assert rules[("q0", True)] == Instruction("q0", True, False, Movement.RIGHT, "q1")
        assert rules[("q3", True)].movement is Movement.HALT

    def test_fresh_table_per_call(self):
        first = SUM.get_instructions()
        first.clear()
        assert len(SUM.get_instructions()) == 4

    @pytest.mark.parametrize("lib", BUILTIN_LIBRARIES, ids=lambda lib: lib.name)
    def test_final_state_is_reached_by_a_rule(self, lib):
        targets = {i.to_state for i in lib.get_instructions().values()}
        assert lib.final_state in targets


# ═══════════════════════════════════════════
# Library results (unary: n is n + 1 ones)
# ═══════════════════════════════════════════

def _run(lib, tape):
    machine = machine_of(f"""
        {{{tape}}};
        I = {{q0}};
        F = {{{lib.final_state}}};
        compose = {{{lib.name}}};
    """)
    return machine.final_result()


class TestResults:
    @pytest.mark.parametrize("tape, ones", [
        ("111011", 3),   # 2 + 1
        ("1011", 1),     # 0 + 1
        ("11110111", 5), # 3 + 2
    ])
    def test_sum(self, tape, ones):
        lib = get_registry().get_library("sum")
        assert _run(lib, tape).ones == ones

    @pytest.mark.parametrize("tape, ones", [("111", 4), ("11", 2), ("1", 0)])
    def test_double(self, tape, ones):
        assert _run(get_registry().get_library("double"), tape).ones == ones

    @pytest.mark.parametrize("tape, ones", [("111", 0), ("1111", 1), ("111111", 1)])
    def test_mod2(self, tape, ones):
        assert _run(get_registry().get_library("mod2"), tape).ones == ones

    @pytest.mark.parametrize("tape, ones", [("111111", 2), ("11111", 2), ("1", 0)])
    def test_div2(self, tape, ones):
        assert _run(get_registry().get_library("div2"), tape).ones == ones

    @pytest.mark.parametrize("tape, ones", [("1111011", 2), ("110111", 0)])
    def test_monus(self, tape, ones):
        assert _run(get_registry().get_library("monus"), tape).ones == ones
