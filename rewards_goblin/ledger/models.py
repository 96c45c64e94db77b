"""
Data models for the cheese-mint collection process state.

LedgerState is a point-in-time snapshot decoded from the process's
View-State response. Decoding is strict about structure: any shape mismatch
raises LedgerStateParseError. Empty maps encoded as JSON arrays ([]) by the
process's Lua JSON encoder decode as empty maps.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from rewards_goblin.core.exceptions import LedgerStateParseError

ROLE_AWARD_CHEESE_MINT = "Award-Cheese-Mint"


def _as_map(value: Any, where: str) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, list) and not value:
        return {}
    if not isinstance(value, dict):
        raise LedgerStateParseError(f"{where} must be an object, got {type(value).__name__}")
    return value


def _as_str(value: Any, where: str, default: str | None = None) -> str:
    if value is None and default is not None:
        return default
    if not isinstance(value, str):
        raise LedgerStateParseError(f"{where} must be a string")
    return value


def _as_int(value: Any, where: str, default: int | None = None) -> int | None:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise LedgerStateParseError(f"{where} must be a number")
    return int(value)


@dataclass(frozen=True)
class CheeseMint:
    """Achievement catalog entry (ledger-assigned id, human-readable name)."""

    id: str
    name: str
    created_at: int | None = None
    updated_at: int | None = None
    created_by: str = ""
    description: str = ""
    points: int = 0
    icon: str = ""
    category: str = ""

    @classmethod
    def from_dict(cls, mint_id: str, item: Any) -> "CheeseMint":
        where = f"cheese_mints_by_id[{mint_id}]"
        item = _as_map(item, where)
        return cls(
            id=_as_str(item.get("id"), f"{where}.id", default=mint_id),
            name=_as_str(item.get("name"), f"{where}.name"),
            created_at=_as_int(item.get("created_at"), f"{where}.created_at"),
            updated_at=_as_int(item.get("updated_at"), f"{where}.updated_at"),
            created_by=_as_str(item.get("created_by"), f"{where}.created_by", default=""),
            description=_as_str(item.get("description"), f"{where}.description", default=""),
            points=_as_int(item.get("points"), f"{where}.points", default=0),
            icon=_as_str(item.get("icon"), f"{where}.icon", default=""),
            category=_as_str(item.get("category"), f"{where}.category", default=""),
        )


@dataclass(frozen=True)
class CheeseMintAward:
    """Evidence that a wallet already received an achievement."""

    awarded_by: str
    awarded_at: int | None
    message_id: str

    @classmethod
    def from_dict(cls, item: Any, where: str) -> "CheeseMintAward":
        item = _as_map(item, where)
        return cls(
            awarded_by=_as_str(item.get("awarded_by"), f"{where}.awarded_by", default=""),
            awarded_at=_as_int(item.get("awarded_at"), f"{where}.awarded_at"),
            message_id=_as_str(item.get("message_id"), f"{where}.message_id", default=""),
        )


@dataclass(frozen=True)
class LedgerState:
    """
    Snapshot of the cheese-mint collection process state.

    acl_roles: role -> address -> enabled
    cheese_mints_by_id: achievement id -> catalog entry
    cheese_mints_by_address: wallet address -> achievement id -> award
    has_acl: False when the state carried no acl.roles section at all
    """

    owner: str
    acl_roles: Mapping[str, Mapping[str, bool]] = field(default_factory=dict)
    cheese_mints_by_id: Mapping[str, CheeseMint] = field(default_factory=dict)
    cheese_mints_by_address: Mapping[str, Mapping[str, CheeseMintAward]] = field(default_factory=dict)
    has_acl: bool = True

    @classmethod
    def from_dict(cls, raw: Any) -> "LedgerState":
        root = _as_map(raw, "state")
        acl = root.get("acl")
        has_acl = isinstance(acl, dict) and acl.get("roles") is not None
        roles_raw = _as_map(acl, "acl").get("roles") if acl is not None else None
        roles: dict[str, dict[str, bool]] = {}
        for role, members in _as_map(roles_raw, "acl.roles").items():
            members = _as_map(members, f"acl.roles[{role}]")
            roles[role] = {addr: bool(enabled) for addr, enabled in members.items()}

        mints = {
            mint_id: CheeseMint.from_dict(mint_id, item)
            for mint_id, item in _as_map(root.get("cheese_mints_by_id"), "cheese_mints_by_id").items()
        }

        awards: dict[str, dict[str, CheeseMintAward]] = {}
        for address, by_id in _as_map(root.get("cheese_mints_by_address"), "cheese_mints_by_address").items():
            where = f"cheese_mints_by_address[{address}]"
            awards[address] = {
                mint_id: CheeseMintAward.from_dict(item, f"{where}[{mint_id}]")
                for mint_id, item in _as_map(by_id, where).items()
            }

        return cls(
            owner=_as_str(root.get("owner"), "owner", default=""),
            acl_roles=roles,
            cheese_mints_by_id=mints,
            cheese_mints_by_address=awards,
            has_acl=has_acl,
        )

    @classmethod
    def from_dry_run(cls, result: Any) -> "LedgerState":
        """
        Decode state from a dry-run result: the first message's Data field is
        the JSON-encoded state. Raises LedgerStateParseError on any mismatch.
        """
        messages = result.get("Messages") if isinstance(result, dict) else None
        if not isinstance(messages, list) or not messages:
            raise LedgerStateParseError("No messages in dry run result")
        first = messages[0]
        data = first.get("Data") if isinstance(first, dict) else None
        if not data:
            raise LedgerStateParseError("No message data in dry run result")
        try:
            decoded = json.loads(data) if isinstance(data, str) else data
        except json.JSONDecodeError as e:
            raise LedgerStateParseError(f"Message data is not valid JSON: {e}") from e
        return cls.from_dict(decoded)

    def role_members(self, role: str) -> Mapping[str, bool] | None:
        return self.acl_roles.get(role)

    def has_award(self, address: str, achievement_id: str) -> bool:
        return achievement_id in self.cheese_mints_by_address.get(address, {})

    def achievement_ids_by_name(self) -> dict[str, str]:
        return {mint.name: mint_id for mint_id, mint in self.cheese_mints_by_id.items()}
