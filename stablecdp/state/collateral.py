"""
Per-account collateral and debt tracking with deterministic ordering.

Implements CollateralTable[Account, AssetId] -> Amount and DebtTable[Account] -> Amount.
Absent keys read as zero; zero entries are dropped to keep the tables sparse.
"""

from typing import Dict, Iterator, Tuple


# Type aliases
Account = str  # caller address / account identifier
AssetId = str  # collateral token identifier
Amount = int  # Non-negative integer (asset-native units or 18-decimal pegged units)


class CollateralTable:
    """
    Deposited collateral mapping (account, asset) -> amount.

    Tables are mutable; the engine core only ever mutates a `copy()` so the
    pre-state of a step stays intact.
    """

    def __init__(self):
        self._deposits: Dict[Tuple[Account, AssetId], Amount] = {}

    def get(self, account: Account, asset: AssetId) -> Amount:
        """Get deposited amount for (account, asset). Returns 0 if not found."""
        return self._deposits.get((account, asset), 0)

    def set(self, account: Account, asset: AssetId, amount: Amount) -> None:
        """
        Set deposited amount for (account, asset).

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Deposit cannot be negative: {amount}")
        if amount == 0:
            self._deposits.pop((account, asset), None)
        else:
            self._deposits[(account, asset)] = amount

    def add(self, account: Account, asset: AssetId, delta: Amount) -> None:
        """
        Add delta to a deposit (negative delta subtracts).

        Raises:
            ValueError: If resulting deposit would be negative
        """
        current = self.get(account, asset)
        new_amount = current + delta
        if new_amount < 0:
            raise ValueError(
                f"Insufficient collateral: {current} + {delta} = {new_amount} < 0"
            )
        self.set(account, asset, new_amount)

    def subtract(self, account: Account, asset: AssetId, delta: Amount) -> None:
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(account, asset, -delta)

    def deposits_of(self, account: Account) -> Dict[AssetId, Amount]:
        """All non-zero deposits of one account, keyed by asset."""
        return {a: amount for (acct, a), amount in self._deposits.items() if acct == account}

    def total_for_asset(self, asset: AssetId) -> Amount:
        """Sum of every account's deposit of `asset`."""
        return sum(amount for (_, a), amount in self._deposits.items() if a == asset)

    def accounts(self) -> Iterator[Account]:
        """Accounts with at least one non-zero deposit, sorted."""
        return iter(sorted({acct for acct, _ in self._deposits}))

    def items(self) -> Iterator[Tuple[Tuple[Account, AssetId], Amount]]:
        """Entries in sorted key order."""
        return iter(sorted(self._deposits.items()))

    def copy(self) -> "CollateralTable":
        clone = CollateralTable()
        clone._deposits = dict(self._deposits)
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CollateralTable):
            return NotImplemented
        return self._deposits == other._deposits

    def __repr__(self) -> str:
        return f"CollateralTable({len(self._deposits)} entries)"


class DebtTable:
    """Outstanding pegged-currency debt per account (18-decimal fixed point)."""

    def __init__(self):
        self._debts: Dict[Account, Amount] = {}

    def get(self, account: Account) -> Amount:
        return self._debts.get(account, 0)

    def set(self, account: Account, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Debt cannot be negative: {amount}")
        if amount == 0:
            self._debts.pop(account, None)
        else:
            self._debts[account] = amount

    def add(self, account: Account, delta: Amount) -> None:
        current = self.get(account)
        new_amount = current + delta
        if new_amount < 0:
            raise ValueError(f"Insufficient debt: {current} + {delta} = {new_amount} < 0")
        self.set(account, new_amount)

    def total(self) -> Amount:
        """Total outstanding debt across all accounts."""
        return sum(self._debts.values())

    def accounts(self) -> Iterator[Account]:
        return iter(sorted(self._debts))

    def items(self) -> Iterator[Tuple[Account, Amount]]:
        return iter(sorted(self._debts.items()))

    def copy(self) -> "DebtTable":
        clone = DebtTable()
        clone._debts = dict(self._debts)
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DebtTable):
            return NotImplemented
        return self._debts == other._debts

    def __repr__(self) -> str:
        return f"DebtTable({len(self._debts)} entries)"
