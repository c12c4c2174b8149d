"""Evaluation of mapping conditions against a record."""
from feedmap.errors import EngineComputeFailure
from feedmap.mapper.mapping import AllRecords, Condition, OnlyIf, Operator
from feedmap.schema.models import Record


def evaluate_condition(condition: Condition, record: Record) -> bool:
    """
    Decide whether a mapping applies to a record.

    The operand is the record's value for the condition field, or the empty
    string when absent. Comparisons are exact and case-sensitive.

    Args:
        condition: AllRecords or OnlyIf
        record: Source record

    Returns:
        True if the mapping applies
    """
    if isinstance(condition, AllRecords):
        return True

    if not isinstance(condition, OnlyIf):
        raise EngineComputeFailure(f"Unknown condition: {condition!r}")

    operand = record.get(condition.field, "")

    if condition.operator is Operator.EQUAL_TO:
        return operand == condition.value
    if condition.operator is Operator.NOT_EQUAL_TO:
        return operand != condition.value
    if condition.operator is Operator.INCLUDES:
        return condition.value in operand
    if condition.operator is Operator.EXCLUDES:
        return condition.value not in operand

    raise EngineComputeFailure(f"Unknown operator: {condition.operator!r}")
