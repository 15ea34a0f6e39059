"""
In-memory fungible token ledgers.

`Token` implements the collateral transfer interface (balances + allowances);
`PeggedCurrency` adds owner-gated mint/burn for the engine-controlled
synthetic currency. Failed transfers return False; misuse of mint/burn raises.
"""

from __future__ import annotations

from typing import Dict, Tuple


class Token:
    """Fungible balance ledger with allowances."""

    def __init__(self, symbol: str, decimals: int = 18):
        self.symbol = symbol
        self.decimals = decimals
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self._total_supply = 0

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def total_supply(self) -> int:
        return self._total_supply

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        if amount < 0:
            return False
        self._allowances[(owner, spender)] = amount
        return True

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        return self._move(sender, to, amount)

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        allowed = self.allowance(owner, spender)
        if amount > allowed:
            return False
        if not self._move(owner, to, amount):
            return False
        self._allowances[(owner, spender)] = allowed - amount
        return True

    def _move(self, sender: str, to: str, amount: int) -> bool:
        if amount < 0 or not to:
            return False
        balance = self.balance_of(sender)
        if amount > balance:
            return False
        self._balances[sender] = balance - amount
        self._balances[to] = self.balance_of(to) + amount
        return True

    def _credit(self, to: str, amount: int) -> None:
        self._balances[to] = self.balance_of(to) + amount
        self._total_supply += amount

    def _debit(self, account: str, amount: int) -> None:
        balance = self.balance_of(account)
        if amount > balance:
            raise ValueError(f"burn amount exceeds balance: {amount} > {balance}")
        self._balances[account] = balance - amount
        self._total_supply -= amount

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.symbol!r}, supply={self._total_supply})"


class MintableToken(Token):
    """Test/mock collateral token anyone can mint."""

    def mint(self, to: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"mint amount must be non-negative: {amount}")
        self._credit(to, amount)


class PeggedCurrency(Token):
    """Synthetic currency ledger whose supply only `owner` controls."""

    def __init__(self, symbol: str, owner: str, decimals: int = 18):
        super().__init__(symbol, decimals)
        self.owner = owner

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self._only_owner(caller)
        if not new_owner:
            raise ValueError("new owner must be non-empty")
        self.owner = new_owner

    def mint(self, caller: str, to: str, amount: int) -> bool:
        self._only_owner(caller)
        if not to:
            raise ValueError("cannot mint to the empty address")
        if amount <= 0:
            raise ValueError(f"mint amount must be positive: {amount}")
        self._credit(to, amount)
        return True

    def burn(self, caller: str, amount: int) -> None:
        """Burn `amount` from the owner's own balance."""
        self._only_owner(caller)
        if amount <= 0:
            raise ValueError(f"burn amount must be positive: {amount}")
        self._debit(caller, amount)

    def _only_owner(self, caller: str) -> None:
        if caller != self.owner:
            raise PermissionError(f"{caller!r} is not the owner of {self.symbol}")
