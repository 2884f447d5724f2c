"""
Symbol Table
============

Tracks every name declared by a program and the runtime slot it owns.

A name lives in exactly one of three categories:

    | Category      | Enters on                        | Readable | Assignable |
    |---------------|----------------------------------|----------|------------|
    | CONSTANT      | const declaration                | yes      | no         |
    | INITIALIZED   | var with initializer, or first   | yes      | yes        |
    |               | assignment to an uninitialized   |          |            |
    | UNINITIALIZED | var without initializer          | no       | yes        |

Slots come from a single counter shared by all categories, so slot order
is declaration order. Moving a variable from UNINITIALIZED to INITIALIZED
keeps its slot. Nothing is ever removed.
"""

from enum import Enum, auto
from typing import Iterator, Optional
import logging

from miniplc0.errors import InternalCompilerError


logger = logging.getLogger(__name__)


class SymbolCategory(Enum):
    """Which mapping a declared name currently occupies."""
    CONSTANT = auto()
    INITIALIZED = auto()
    UNINITIALIZED = auto()


class SymbolTable:
    """
    Three disjoint name -> slot mappings with a shared slot counter.

    Example:
        >>> table = SymbolTable()
        >>> table.add_constant("a")
        0
        >>> table.add_uninitialized("b")
        1
        >>> table.mark_initialized("b")
        >>> table.category("b")
        <SymbolCategory.INITIALIZED: 2>
    """

    def __init__(self):
        self._mappings: dict[SymbolCategory, dict[str, int]] = {
            category: {} for category in SymbolCategory
        }
        self._next_slot = 0

    # =========================================================================
    # Declarations
    # =========================================================================

    def add_constant(self, name: str) -> int:
        """Declare a constant and return its slot."""
        return self._add(name, SymbolCategory.CONSTANT)

    def add_variable(self, name: str) -> int:
        """Declare an initialized variable and return its slot."""
        return self._add(name, SymbolCategory.INITIALIZED)

    def add_uninitialized(self, name: str) -> int:
        """Declare a variable that has no value yet and return its slot."""
        return self._add(name, SymbolCategory.UNINITIALIZED)

    def _add(self, name: str, category: SymbolCategory) -> int:
        if self.is_declared(name):
            raise InternalCompilerError(f"'{name}' is already in the symbol table")

        slot = self._next_slot
        self._mappings[category][name] = slot
        self._next_slot += 1
        logger.debug(f"Allocated slot {slot} for {category.name.lower()} '{name}'")
        return slot

    def mark_initialized(self, name: str) -> None:
        """
        Move a variable from UNINITIALIZED to INITIALIZED, keeping its slot.

        Raises:
            InternalCompilerError: If the name is not an uninitialized variable
        """
        uninitialized = self._mappings[SymbolCategory.UNINITIALIZED]
        if name not in uninitialized:
            raise InternalCompilerError(f"'{name}' is not an uninitialized variable")
        self._mappings[SymbolCategory.INITIALIZED][name] = uninitialized.pop(name)

    # =========================================================================
    # Queries
    # =========================================================================

    def category(self, name: str) -> Optional[SymbolCategory]:
        """Return the category holding name, or None if undeclared."""
        for category, mapping in self._mappings.items():
            if name in mapping:
                return category
        return None

    def is_declared(self, name: str) -> bool:
        return self.category(name) is not None

    def is_constant(self, name: str) -> bool:
        return name in self._mappings[SymbolCategory.CONSTANT]

    def is_initialized(self, name: str) -> bool:
        return name in self._mappings[SymbolCategory.INITIALIZED]

    def is_uninitialized(self, name: str) -> bool:
        return name in self._mappings[SymbolCategory.UNINITIALIZED]

    def is_readable(self, name: str) -> bool:
        """True for constants and initialized variables."""
        return self.is_constant(name) or self.is_initialized(name)

    def slot(self, name: str) -> int:
        """
        Return the slot of a declared name.

        Raises:
            InternalCompilerError: If the name was never declared
        """
        for mapping in self._mappings.values():
            if name in mapping:
                return mapping[name]
        raise InternalCompilerError(f"'{name}' is not in the symbol table")

    def __len__(self) -> int:
        """Number of slots allocated so far."""
        return self._next_slot

    def __contains__(self, name: str) -> bool:
        return self.is_declared(name)

    def __iter__(self) -> Iterator[tuple[str, int, SymbolCategory]]:
        """Iterate (name, slot, category) in slot order."""
        entries = [
            (name, slot, category)
            for category, mapping in self._mappings.items()
            for name, slot in mapping.items()
        ]
        return iter(sorted(entries, key=lambda entry: entry[1]))
