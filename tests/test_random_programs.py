"""
Randomised Program Tests
========================

Generates random well-formed programs from a seeded generator, compiles
them, and checks the stack machine prints the values computed directly
by the generator.
"""

import random

import pytest
from miniplc0.analyser import analyse
from miniplc0.lexer import tokenize
from miniplc0.vm import execute, wrap_int32


def truncating_divide(lhs: int, rhs: int) -> int:
    quotient = abs(lhs) // abs(rhs)
    return -quotient if (lhs < 0) != (rhs < 0) else quotient


class ProgramGenerator:
    """
    Builds a random valid program together with its expected output.

    Every binary and unary expression is parenthesised so the generated
    text has exactly the evaluation order the generator assumes. Division
    only ever uses a non-zero literal divisor.
    """

    def __init__(self, seed: int):
        self.rng = random.Random(seed)
        self.values: dict[str, int] = {}
        self.variables: list[str] = []
        self.expected: list[int] = []

    def expression(self, depth: int = 0) -> tuple[str, int]:
        choice = self.rng.randrange(5) if depth < 3 else self.rng.randrange(2)

        if choice == 0 or (choice == 1 and not self.values):
            value = self.rng.randrange(1000)
            return str(value), value
        if choice == 1:
            name = self.rng.choice(sorted(self.values))
            return name, self.values[name]
        if choice == 2:
            text, value = self.expression(depth + 1)
            if self.rng.random() < 0.5:
                return f"-({text})", wrap_int32(-value)
            return f"+({text})", value
        if choice == 3:
            text, value = self.expression(depth + 1)
            divisor = self.rng.randrange(1, 10)
            return f"({text} / {divisor})", truncating_divide(value, divisor)

        lhs_text, lhs = self.expression(depth + 1)
        rhs_text, rhs = self.expression(depth + 1)
        operator = self.rng.choice("+-*")
        if operator == "+":
            value = lhs + rhs
        elif operator == "-":
            value = lhs - rhs
        else:
            value = lhs * rhs
        return f"({lhs_text} {operator} {rhs_text})", wrap_int32(value)

    def program(self) -> str:
        lines = ["begin"]

        for i in range(self.rng.randrange(4)):
            name = f"c{i}"
            value = self.rng.randrange(-1000, 1000)
            lines.append(f"  const {name} = {value};")
            self.values[name] = value

        for i in range(self.rng.randrange(5)):
            name = f"v{i}"
            self.variables.append(name)
            if self.rng.random() < 0.5:
                text, value = self.expression()
                lines.append(f"  var {name} = {text};")
                self.values[name] = value
            else:
                lines.append(f"  var {name};")

        for _ in range(self.rng.randrange(1, 10)):
            kind = self.rng.randrange(3)
            if kind == 0 and self.variables:
                name = self.rng.choice(self.variables)
                text, value = self.expression()
                lines.append(f"  {name} = {text};")
                self.values[name] = value
            elif kind == 1:
                lines.append("  ;")
            else:
                text, value = self.expression()
                lines.append(f"  print({text});")
                self.expected.append(value)

        lines.append("end")
        return "\n".join(lines) + "\n"


@pytest.mark.parametrize("seed", range(40))
def test_random_program(seed):
    generator = ProgramGenerator(seed)
    source = generator.program()

    tokens, error = tokenize(source)
    assert error is None, source
    instructions, error = analyse(tokens)
    assert error is None, f"{error}\n{source}"

    assert execute(instructions) == generator.expected, source


@pytest.mark.parametrize("seed", range(5))
def test_random_program_is_deterministic(seed):
    source = ProgramGenerator(seed).program()
    tokens, _ = tokenize(source)
    assert analyse(tokens) == analyse(tokens)
