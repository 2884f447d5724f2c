"""
Stack Machine Test Suite
========================

Tests for the reference stack machine: stepping, slot access, 32-bit
arithmetic, and runtime errors.
"""

import pytest
from miniplc0.vm import StackMachine, execute, wrap_int32
from miniplc0.instructions import Instruction, Operation
from miniplc0.errors import ExecutionError
from miniplc0 import compile_plc0


def program(*pairs):
    """Build an instruction list from (operation name, operand) pairs."""
    return [Instruction(Operation[name], operand) for name, operand in pairs]


class TestExecution:
    """Test normal execution."""

    def test_empty_program(self):
        assert execute([]) == []

    def test_compiled_program(self):
        source = """
        begin
          const a = 1;
          var b = 2;
          var c;
          c = 3;
          print(a + b + c);
        end
        """
        assert execute(compile_plc0(source)) == [6]

    def test_store_and_load(self):
        code = program(("LIT", 0), ("LIT", 9), ("STO", 0), ("LOD", 0), ("WRT", 0))
        assert execute(code) == [9]

    def test_step_by_step(self):
        vm = StackMachine(program(("LIT", 2), ("LIT", 3), ("MUL", 0)))
        vm.step()
        assert vm.stack == [2]
        vm.step()
        vm.step()
        assert vm.stack == [6]
        assert vm.halted

    def test_output_callback(self):
        seen = []
        vm = StackMachine(program(("LIT", 1), ("WRT", 0), ("LIT", 2), ("WRT", 0)),
                          on_output=seen.append)
        assert vm.run() == [1, 2]
        assert seen == [1, 2]

    def test_reset(self):
        vm = StackMachine(program(("LIT", 5), ("WRT", 0)))
        vm.run()
        vm.reset()
        assert vm.pc == 0
        assert vm.stack == []
        assert vm.output == []
        assert vm.run() == [5]

    def test_negation_idiom(self):
        assert execute(compile_plc0("begin print(-7); end")) == [-7]


class TestArithmetic:
    """Test 32-bit signed arithmetic."""

    @pytest.mark.parametrize("lhs, rhs, expected", [
        (7, 2, 3),
        (-7, 2, -3),
        (7, -2, -3),
        (-7, -2, 3),
        (0, 5, 0),
    ])
    def test_division_truncates_toward_zero(self, lhs, rhs, expected):
        code = program(("LIT", lhs), ("LIT", rhs), ("DIV", 0), ("WRT", 0))
        assert execute(code) == [expected]

    def test_addition_wraps(self):
        code = program(("LIT", 2147483647), ("LIT", 1), ("ADD", 0), ("WRT", 0))
        assert execute(code) == [-2147483648]

    def test_multiplication_wraps(self):
        code = program(("LIT", 65536), ("LIT", 65536), ("MUL", 0), ("WRT", 0))
        assert execute(code) == [0]

    def test_subtraction_order(self):
        code = program(("LIT", 10), ("LIT", 4), ("SUB", 0), ("WRT", 0))
        assert execute(code) == [6]

    @pytest.mark.parametrize("value, expected", [
        (0, 0),
        (2**31, -(2**31)),
        (2**32, 0),
        (-(2**31) - 1, 2**31 - 1),
        (-1, -1),
    ])
    def test_wrap_int32(self, value, expected):
        assert wrap_int32(value) == expected


class TestRuntimeErrors:
    """Test execution failures."""

    def test_division_by_zero(self):
        with pytest.raises(ExecutionError) as excinfo:
            execute(compile_plc0("begin print(1 / 0); end"))
        assert excinfo.value.pc == 2
        assert "division by zero" in str(excinfo.value)

    @pytest.mark.parametrize("pairs", [
        [("ADD", 0)],
        [("LIT", 1), ("SUB", 0)],
        [("WRT", 0)],
        [("STO", 0)],
    ])
    def test_stack_underflow(self, pairs):
        with pytest.raises(ExecutionError, match="stack underflow"):
            execute(program(*pairs))

    def test_load_outside_stack(self):
        with pytest.raises(ExecutionError, match="slot 3"):
            execute(program(("LIT", 1), ("LOD", 3)))

    def test_store_outside_stack(self):
        with pytest.raises(ExecutionError) as excinfo:
            execute(program(("LIT", 1), ("LIT", 2), ("STO", 1)))
        assert excinfo.value.pc == 2

    def test_negative_slot(self):
        with pytest.raises(ExecutionError):
            execute(program(("LIT", 1), ("LOD", -1)))
