"""Named sets of registers that can be collapsed to one symbol in a field list."""

from __future__ import annotations

from fleecekit.fieldlist import FieldList


def _format_name(base_name: str, number: int) -> str:
    if "%" in base_name:
        return base_name % number
    return base_name


class RegisterSet:
    """A group of register names that all stand for the same symbol."""

    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        self._names: dict[str, str] = {}
        self._name_list: list[str] = []

    @property
    def names(self) -> tuple[str, ...]:
        """Register names in the order they were added."""
        return tuple(self._name_list)

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, text: object) -> bool:
        return text in self._names

    def add_reg_name(self, name: str) -> None:
        """Add a register name to the set."""
        self._names.setdefault(name, self.symbol)
        self._name_list.append(name)

    def is_reg(self, text: str) -> bool:
        """Return True if ``text`` is one of the registers of this set."""
        return text in self._names

    def replace_reg_names_with_symbol(self, field_list: FieldList) -> None:
        """Replace every field naming a register of this set with the set's symbol."""
        for index, field in enumerate(list(field_list)):
            symbol = self._names.get(field)
            if symbol is not None:
                field_list.set_field(index, symbol)

    @classmethod
    def make_formatted(
        cls, set_name: str, base_name: str, lower_bound: int, upper_bound: int
    ) -> RegisterSet:
        """Build a set from a printf-style name such as ``"r%d"`` over a number range.

        Names are added from ``upper_bound`` down to ``lower_bound``.
        """
        regs = cls(set_name)
        for number in range(upper_bound, lower_bound - 1, -1):
            regs.add_reg_name(_format_name(base_name, number))
        return regs