from typing import Any

from sqlalchemy import BinaryExpression

_RANGE_PREFIXES = ("min_", "max_")


def build_filters(model: type, filter_data: dict[str, Any]) -> list[BinaryExpression]:
    """Turn query parameters into column filters.

    ``min_<column>`` and ``max_<column>`` become range bounds, any other key is
    an equality match on the column of the same name.
    """
    filters: list[BinaryExpression] = []
    for name, value in filter_data.items():
        if name.startswith(_RANGE_PREFIXES):
            column = getattr(model, name[4:])
            filters.append(column >= value if name.startswith("min_") else column <= value)
        else:
            filters.append(getattr(model, name) == value)
    return filters
