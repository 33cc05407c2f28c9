"""
Local evaluation of backend domains.

Supports the subset of the Odoo domain language the resolver emits:
prefix operators '&', '|', '!' with implicit AND between top-level terms,
and leaf operators '=', '!=', 'in', 'not in'.
"""
from typing import Any

from ..errors import InvalidArgument
from .models import many2one_id

LEAF_OPERATORS = {'=', '!=', 'in', 'not in'}


def _normalize(value: Any) -> Any:
    """Reduce many2one pairs to ids and False to None."""
    if value is False or value is None:
        return None
    if isinstance(value, (list, tuple)) and len(value) == 2 and isinstance(value[1], str):
        return many2one_id(value)
    return value


def _evaluate_leaf(leaf: Any, record: dict) -> bool:
    try:
        field_name, operator, expected = leaf
    except (TypeError, ValueError):
        raise InvalidArgument(f"Malformed domain term: {leaf!r}") from None

    if operator not in LEAF_OPERATORS:
        raise InvalidArgument(f"Unsupported domain operator: {operator!r}")

    actual = _normalize(record.get(field_name))

    if operator in ('in', 'not in'):
        members = {_normalize(v) for v in expected}
        found = actual in members
        return found if operator == 'in' else not found

    expected = _normalize(expected)
    if operator == '=':
        return actual == expected
    return actual != expected


def evaluate_domain(domain: list, record: dict) -> bool:
    """
    Check whether a record satisfies a domain.

    Terms are consumed right to left; each prefix operator pops its operands
    off the stack. Whatever remains is combined with AND.
    """
    stack: list[bool] = []
    for term in reversed(list(domain)):
        if term == '!':
            if not stack:
                raise InvalidArgument("Domain operator '!' is missing its operand")
            stack.append(not stack.pop())
        elif term in ('&', '|'):
            if len(stack) < 2:
                raise InvalidArgument(f"Domain operator {term!r} is missing operands")
            left = stack.pop()
            right = stack.pop()
            stack.append(left and right if term == '&' else left or right)
        else:
            stack.append(_evaluate_leaf(term, record))
    return all(stack)
