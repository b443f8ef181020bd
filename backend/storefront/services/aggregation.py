"""
storefront/services/aggregation.py - Small aggregation pipeline over user documents.

Firestore has no server side unwind/group over array elements, so the cart total is
computed with an explicit, ordered pipeline applied to the loaded document:

    match  → keep the one user row whose `_id` equals the requested user id
    unwind → one row per element of `cart`
    group  → group by `_id`, sum `cart.price` into `total`

An empty cart unwinds to no rows, so the group stage yields nothing; `cart_total` turns
"no rows" into a total of zero. A cart line without a numeric price is a schema mismatch
and raises instead of silently counting as zero.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Dict, Iterable, Iterator, List

from storefront.core.errors import SchemaMismatch

Row = Dict[str, Any]
Stage = Callable[[Iterable[Row]], Iterator[Row]]

CENTS = Decimal("0.01")
_MISSING = object()


def _field(path: str) -> str:
    return path[1:] if path.startswith("$") else path


def lookup(row: Row, path: str) -> Any:
    """Resolve a dotted field path (`cart.price`); returns a sentinel when absent."""
    value: Any = row
    for part in _field(path).split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def to_money(value: Any) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def match(**criteria: Any) -> Stage:
    def stage(rows: Iterable[Row]) -> Iterator[Row]:
        for row in rows:
            if all(lookup(row, k) == v for k, v in criteria.items()):
                yield row
    return stage


def unwind(path: str) -> Stage:
    field = _field(path)

    def stage(rows: Iterable[Row]) -> Iterator[Row]:
        for row in rows:
            values = lookup(row, field)
            if values is _MISSING or not values:
                continue
            if not isinstance(values, list):
                raise SchemaMismatch(f"'{field}' is not an array")
            for value in values:
                yield {**row, field: value}
    return stage


class Sum:
    """`$sum` accumulator over a numeric field path."""

    def __init__(self, path: str):
        self.path = _field(path)

    def initial(self) -> Decimal:
        return Decimal("0")

    def step(self, acc: Decimal, row: Row) -> Decimal:
        value = lookup(row, self.path)
        if value is _MISSING:
            raise SchemaMismatch(f"field '{self.path}' is missing")
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            raise SchemaMismatch(f"field '{self.path}' is not numeric: {value!r}")
        return acc + Decimal(str(value))


def group(by: str, **accumulators: Sum) -> Stage:
    def stage(rows: Iterable[Row]) -> Iterator[Row]:
        groups: Dict[Any, Row] = {}
        for row in rows:
            key = lookup(row, by)
            if key is _MISSING:
                key = None
            out = groups.get(key)
            if out is None:
                out = {"_id": key, **{name: acc.initial() for name, acc in accumulators.items()}}
                groups[key] = out
            for name, acc in accumulators.items():
                out[name] = acc.step(out[name], row)
        yield from groups.values()
    return stage


class Pipeline:
    def __init__(self, *stages: Stage):
        self.stages = stages

    def run(self, rows: Iterable[Row]) -> List[Row]:
        stream: Iterable[Row] = rows
        for stage in self.stages:
            stream = stage(stream)
        return list(stream)


def cart_total_pipeline(user_id: str) -> Pipeline:
    return Pipeline(
        match(_id=user_id),
        unwind("$cart"),
        group("$_id", total=Sum("$cart.price")),
    )


def cart_total(user_id: str, cart: List[Row]) -> Decimal:
    """Total price of a cart, 0.00 when the pipeline yields no rows."""
    rows = cart_total_pipeline(user_id).run([{"_id": user_id, "cart": cart}])
    if not rows:
        return Decimal("0.00")
    return to_money(rows[0]["total"])
