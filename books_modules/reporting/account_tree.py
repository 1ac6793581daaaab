"""
Account tree aggregation (``books_modules.reporting.account_tree``).

Responsibility
--------------
Turns the chart of accounts plus a list of ledger entries into a pruned,
rolled-up account tree whose rows become report rows:

1. group entries by account,
2. bucket each account's entries into date ranges (credit-normal root
   types report ``credit - debit``; entries outside every range are
   dropped),
3. start every node flagged for pruning,
4. seed each active account's values and merge them up its ancestor
   chain, clearing the prune flag of every node on the way,
5. attach children to parents (done once when the forest is built),
6. keep only roots (optionally of some root types),
7. prune subtrees with no active node,
8. flatten depth-first with levels,
9. total by summing true leaves only (non-group accounts without
   children), never the rolled-up group values.

Architecture position
---------------------
**Modules layer** -- pure functions over kernel selector records.  ZERO
I/O.

Invariants enforced
-------------------
* Immutable arena: the forest is a tuple of frozen nodes addressed by
  index; every pass returns a new structure and nothing is mutated after
  it is returned, so concurrent report runs never share state.
* A group's value for a key equals the sum of the values seeded at or
  below it.
* Traversals use an explicit stack and are generators: every call to
  ``walk()`` or ``leaves()`` starts a fresh, independent iteration.

Failure modes
-------------
* MissingParentAccountError -- an account names a parent that does not
  exist.  The subtree is never silently dropped.
* AccountCycleError -- parent links form a cycle.
* AccountNotFoundError -- an entry is posted to an unknown account.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType

from books_kernel.db.types import enum_value
from books_kernel.exceptions import (
    AccountCycleError,
    AccountNotFoundError,
    MissingParentAccountError,
)
from books_kernel.models.account import is_credit_normal
from books_kernel.selectors.account_selector import AccountRecord
from books_kernel.selectors.ledger_selector import LedgerEntryRecord
from books_modules.reporting.date_ranges import DateRange

_ZERO = Decimal("0")

ValueMap = Mapping[Hashable, Decimal]


# =========================================================================
# Forest
# =========================================================================


@dataclass(frozen=True)
class AccountNode:
    """One account in the arena; links are indices into the forest."""

    index: int
    account: AccountRecord
    parent: int | None
    children: tuple[int, ...] = ()

    @property
    def name(self) -> str:
        return self.account.name

    @property
    def root_type(self) -> str:
        return self.account.root_type

    @property
    def is_group(self) -> bool:
        return self.account.is_group

    @property
    def is_leaf(self) -> bool:
        """True leaf: a non-group account with no children."""
        return not self.account.is_group and not self.children


@dataclass(frozen=True)
class AccountForest:
    """Immutable arena of account nodes with parent and child links."""

    nodes: tuple[AccountNode, ...]
    roots: tuple[int, ...]
    by_name: Mapping[str, int]

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, name: object) -> bool:
        return name in self.by_name

    def index_of(self, name: str) -> int:
        try:
            return self.by_name[name]
        except KeyError:
            raise AccountNotFoundError(name) from None

    def node(self, name: str) -> AccountNode:
        return self.nodes[self.index_of(name)]

    def ancestors(self, index: int) -> Iterator[int]:
        """Indices of the parent, grandparent, ... of a node."""
        parent = self.nodes[index].parent
        while parent is not None:
            yield parent
            parent = self.nodes[parent].parent

    def roots_of_type(self, root_types: Iterable[str] | None = None) -> tuple[int, ...]:
        if root_types is None:
            return self.roots
        wanted = {enum_value(r) for r in root_types}
        return tuple(i for i in self.roots if self.nodes[i].root_type in wanted)

    def walk(
        self,
        roots: Sequence[int] | None = None,
        include: frozenset[int] | None = None,
    ) -> Iterator[tuple[AccountNode, int]]:
        """
        Depth-first pre-order traversal yielding ``(node, level)``.

        ``include`` restricts the walk to a set of node indices; a node
        outside it is skipped together with its subtree.
        """
        start = self.roots if roots is None else roots
        stack = [(index, 0) for index in reversed(start)]
        while stack:
            index, level = stack.pop()
            if include is not None and index not in include:
                continue
            node = self.nodes[index]
            yield node, level
            stack.extend((child, level + 1) for child in reversed(node.children))

    def leaves(
        self,
        roots: Sequence[int] | None = None,
        include: frozenset[int] | None = None,
    ) -> Iterator[AccountNode]:
        """True leaves under ``roots``, in display order."""
        for node, _level in self.walk(roots, include):
            if node.is_leaf:
                yield node


def build_forest(accounts: Iterable[AccountRecord]) -> AccountForest:
    """
    Link accounts to their parents and return the forest.

    Children keep the order of ``accounts``.

    Raises:
        MissingParentAccountError: A parent name does not exist.
        AccountCycleError: Parent links form a cycle.
    """
    records = list(accounts)
    by_name = {record.name: index for index, record in enumerate(records)}

    parents: list[int | None] = []
    for record in records:
        if record.parent_account is None:
            parents.append(None)
            continue
        parent = by_name.get(record.parent_account)
        if parent is None:
            raise MissingParentAccountError(record.name, record.parent_account)
        parents.append(parent)

    _check_acyclic(records, parents)

    children: list[list[int]] = [[] for _ in records]
    for index, parent in enumerate(parents):
        if parent is not None:
            children[parent].append(index)

    nodes = tuple(
        AccountNode(index, record, parents[index], tuple(children[index]))
        for index, record in enumerate(records)
    )
    roots = tuple(index for index, parent in enumerate(parents) if parent is None)
    return AccountForest(nodes, roots, MappingProxyType(by_name))


def _check_acyclic(records: list[AccountRecord], parents: list[int | None]) -> None:
    # 0 = unvisited, 1 = on the current parent chain, 2 = known to reach a root
    state = [0] * len(records)
    for start in range(len(records)):
        chain: list[int] = []
        current = start
        while current is not None and state[current] == 0:
            state[current] = 1
            chain.append(current)
            current = parents[current]
        if current is not None and state[current] == 1:
            cycle = chain[chain.index(current):] + [current]
            raise AccountCycleError([records[i].name for i in cycle])
        for index in chain:
            state[index] = 2


# =========================================================================
# Aggregation
# =========================================================================


def group_by_account(
    entries: Iterable[LedgerEntryRecord],
) -> dict[str, tuple[LedgerEntryRecord, ...]]:
    """Step 1: account name -> its entries, in input order."""
    grouped: dict[str, list[LedgerEntryRecord]] = {}
    for entry in entries:
        grouped.setdefault(entry.account, []).append(entry)
    return {account: tuple(items) for account, items in grouped.items()}


def signed_balance(entry: LedgerEntryRecord, credit_normal: bool) -> Decimal:
    if credit_normal:
        return entry.credit - entry.debit
    return entry.debit - entry.credit


def find_range(ranges: Sequence[DateRange], value) -> DateRange | None:
    for date_range in ranges:
        if date_range.contains(value):
            return date_range
    return None


def group_by_date_range(
    forest: AccountForest,
    entries_by_account: Mapping[str, Sequence[LedgerEntryRecord]],
    ranges: Sequence[DateRange],
) -> dict[str, ValueMap]:
    """
    Step 2: account name -> {date range: signed balance}.

    Accounts whose entries all fall outside ``ranges`` are absent from the
    result.
    """
    values: dict[str, ValueMap] = {}
    for account, entries in entries_by_account.items():
        credit_normal = is_credit_normal(forest.node(account).root_type)
        value_map: dict[Hashable, Decimal] = {}
        for entry in entries:
            date_range = find_range(ranges, entry.date)
            if date_range is None:
                continue
            value_map[date_range] = (
                value_map.get(date_range, _ZERO) + signed_balance(entry, credit_normal)
            )
        if value_map:
            values[account] = MappingProxyType(value_map)
    return values


@dataclass(frozen=True)
class TreeRow:
    """One flattened node of an aggregated tree."""

    node: AccountNode
    level: int
    values: ValueMap


@dataclass(frozen=True)
class AccountTree:
    """
    Result of one aggregation run: rolled-up values and the kept nodes.

    ``values`` holds an entry for every kept node; a kept group with no
    activity of its own under a key reports zero for it.
    """

    forest: AccountForest
    keys: tuple[Hashable, ...]
    roots: tuple[int, ...]
    values: Mapping[int, ValueMap]
    kept: frozenset[int]

    def value(self, index: int, key: Hashable) -> Decimal:
        return self.values.get(index, {}).get(key, _ZERO)

    def rows(self) -> Iterator[TreeRow]:
        """Step 8: kept nodes depth-first with their levels."""
        empty: ValueMap = MappingProxyType({})
        for node, level in self.forest.walk(self.roots, self.kept):
            yield TreeRow(node, level, self.values.get(node.index, empty))

    def leaves(self) -> Iterator[AccountNode]:
        """Kept true leaves; a fresh iteration on every call."""
        return self.forest.leaves(self.roots, self.kept)

    def leaf_totals(self) -> dict[Hashable, Decimal]:
        """Step 9: per-key totals over true leaves only."""
        totals = {key: _ZERO for key in self.keys}
        for leaf in self.leaves():
            for key in self.keys:
                totals[key] += self.value(leaf.index, key)
        return totals


def seed_values(
    forest: AccountForest,
    account_values: Mapping[str, ValueMap],
) -> tuple[Mapping[int, ValueMap], frozenset[int]]:
    """
    Steps 3-4: roll each account's own values up its ancestor chain.

    Returns:
        (rolled-up values per node index, indices whose prune flag was
        cleared).
    """
    rolled: dict[int, dict[Hashable, Decimal]] = {}
    active: set[int] = set()
    for account, value_map in account_values.items():
        index = forest.index_of(account)
        for target in (index, *forest.ancestors(index)):
            merged = rolled.setdefault(target, {})
            for key, amount in value_map.items():
                merged[key] = merged.get(key, _ZERO) + amount
            active.add(target)

    frozen = {index: MappingProxyType(merged) for index, merged in rolled.items()}
    return MappingProxyType(frozen), frozenset(active)


def prune(
    forest: AccountForest,
    roots: Sequence[int],
    active: frozenset[int],
) -> frozenset[int]:
    """
    Step 7: nodes to keep under ``roots``.

    A node is kept when it is active or has a kept descendant.
    """
    kept: set[int] = set()
    # Post-order: (index, children_done)
    stack = [(index, False) for index in roots]
    while stack:
        index, children_done = stack.pop()
        node = forest.nodes[index]
        if not children_done:
            stack.append((index, True))
            stack.extend((child, False) for child in node.children)
            continue
        if index in active or any(child in kept for child in node.children):
            kept.add(index)
    return frozenset(kept)


def build_tree(
    forest: AccountForest,
    account_values: Mapping[str, ValueMap],
    keys: Sequence[Hashable],
    root_types: Iterable[str] | None = None,
) -> AccountTree:
    """
    Steps 3-7 over already grouped values.

    Args:
        forest: The chart of accounts.
        account_values: Each account's own values, keyed by column.
        keys: Column keys, in column order.
        root_types: Keep only roots of these root types (all when None).
    """
    values, active = seed_values(forest, account_values)
    roots = forest.roots_of_type(root_types)
    kept = prune(forest, roots, active)
    return AccountTree(
        forest=forest,
        keys=tuple(keys),
        roots=roots,
        values=values,
        kept=kept,
    )


def aggregate(
    forest: AccountForest,
    entries: Iterable[LedgerEntryRecord],
    ranges: Sequence[DateRange],
    root_types: Iterable[str] | None = None,
) -> AccountTree:
    """Steps 1-7: entries to a pruned, rolled-up tree keyed by date range."""
    values = group_by_date_range(forest, group_by_account(entries), ranges)
    return build_tree(forest, values, ranges, root_types)
