"""SQL statements and row mappers shared by the SQLAlchemy ledger adapters."""

from collections import defaultdict
from datetime import date, datetime, time
from typing import Iterable

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Connection

from src.domain.constants import CURRENCY_NAMESPACE
from src.domain.models import (
    Account,
    Commodity,
    Money,
    ReconcileState,
    SplitDraft,
    Transaction,
)
from src.domain.services.normalization import (
    coerce_flag,
    normalize_account_type,
    normalize_mnemonic,
    normalize_namespace,
)

# GnuCash stores date-only post dates at 10:59 UTC.
POST_DATE_TIME = time(10, 59)

ACCOUNT_COLUMNS = """
    guid, name, account_type, parent_guid, commodity_guid,
    commodity_scu, hidden, placeholder
"""

COMMODITY_COLUMNS = "guid, namespace, mnemonic, fullname, fraction, quote_source"

SPLIT_COLUMNS = """
    guid, tx_guid, account_guid, memo, action, reconcile_state,
    reconcile_date, value_num, value_denom, quantity_num, quantity_denom
"""


def select_accounts(
    conn: Connection,
    guids: Iterable[str] | None = None,
) -> list[Account]:
    """Read accounts, all of them when ``guids`` is None."""
    if guids is None:
        query = text(f"SELECT {ACCOUNT_COLUMNS} FROM accounts")
        rows = conn.execute(query).all()
    else:
        guid_list = list(guids)
        if not guid_list:
            return []
        query = text(
            f"SELECT {ACCOUNT_COLUMNS} FROM accounts WHERE guid IN :guids"
        ).bindparams(bindparam("guids", expanding=True))
        rows = conn.execute(query, {"guids": guid_list}).all()
    return [account_from_row(row) for row in rows]


def select_child_account(
    conn: Connection,
    parent_guid: str,
    name: str,
    account_type: str | None = None,
) -> Account | None:
    params = {"parent_guid": parent_guid, "name": name}
    type_filter = ""
    if account_type is not None:
        type_filter = " AND account_type = :account_type"
        params["account_type"] = account_type
    query = text(
        f"""
        SELECT {ACCOUNT_COLUMNS}
        FROM accounts
        WHERE parent_guid = :parent_guid AND name = :name{type_filter}
        LIMIT 1
        """
    )
    row = conn.execute(query, params).first()
    return account_from_row(row) if row else None


def select_commodities(
    conn: Connection,
    guids: Iterable[str],
) -> dict[str, Commodity]:
    guid_list = list(guids)
    if not guid_list:
        return {}
    query = text(
        f"SELECT {COMMODITY_COLUMNS} FROM commodities WHERE guid IN :guids"
    ).bindparams(bindparam("guids", expanding=True))
    rows = conn.execute(query, {"guids": guid_list}).all()
    commodities = [commodity_from_row(row) for row in rows]
    return {commodity.guid: commodity for commodity in commodities}


def select_commodity(
    conn: Connection,
    namespace: str,
    mnemonic: str,
) -> Commodity | None:
    query = text(
        f"""
        SELECT {COMMODITY_COLUMNS}
        FROM commodities
        WHERE namespace = :namespace AND mnemonic = :mnemonic
        LIMIT 1
        """
    )
    row = conn.execute(
        query,
        {
            "namespace": normalize_namespace(namespace),
            "mnemonic": normalize_mnemonic(mnemonic),
        },
    ).first()
    return commodity_from_row(row) if row else None


def select_any_currency(conn: Connection) -> Commodity | None:
    query = text(
        f"""
        SELECT {COMMODITY_COLUMNS}
        FROM commodities
        WHERE namespace = :namespace
        ORDER BY mnemonic
        LIMIT 1
        """
    )
    row = conn.execute(query, {"namespace": CURRENCY_NAMESPACE}).first()
    return commodity_from_row(row) if row else None


def select_transactions(
    conn: Connection,
    tx_guids: Iterable[str] | None = None,
    account_guids: Iterable[str] | None = None,
) -> list[Transaction]:
    """Read transactions with their splits.

    Args:
        conn: Open connection.
        tx_guids: Restrict to these transactions.
        account_guids: Restrict to transactions touching these accounts.

    Returns:
        list[Transaction]: Transactions ordered by post date then GUID.
    """
    header_sql = """
        SELECT guid, currency_guid, num, post_date, enter_date, description
        FROM transactions
    """
    params: dict[str, list[str]] = {}
    expanding = []
    if tx_guids is not None:
        params["tx_guids"] = list(tx_guids)
        if not params["tx_guids"]:
            return []
        header_sql += " WHERE guid IN :tx_guids"
        expanding.append(bindparam("tx_guids", expanding=True))
    elif account_guids is not None:
        params["account_guids"] = list(account_guids)
        if not params["account_guids"]:
            return []
        header_sql += """
        WHERE guid IN (
            SELECT DISTINCT tx_guid FROM splits
            WHERE account_guid IN :account_guids
        )
        """
        expanding.append(bindparam("account_guids", expanding=True))
    header_sql += " ORDER BY post_date, guid"
    headers = conn.execute(text(header_sql).bindparams(*expanding), params).all()
    if not headers:
        return []

    split_query = text(
        f"""
        SELECT {SPLIT_COLUMNS}
        FROM splits
        WHERE tx_guid IN :tx_guids
        ORDER BY tx_guid, guid
        """
    ).bindparams(bindparam("tx_guids", expanding=True))
    split_rows = conn.execute(
        split_query,
        {"tx_guids": [row.guid for row in headers]},
    ).all()
    splits_by_tx: dict[str, list[SplitDraft]] = defaultdict(list)
    for row in split_rows:
        splits_by_tx[row.tx_guid].append(split_from_row(row))

    return [
        Transaction(
            guid=row.guid,
            currency_guid=row.currency_guid,
            post_date=coerce_date(row.post_date),
            enter_date=coerce_datetime(row.enter_date),
            description=row.description or "",
            splits=tuple(splits_by_tx.get(row.guid, ())),
            num=row.num or "",
        )
        for row in headers
    ]


def account_from_row(row) -> Account:
    return Account(
        guid=row.guid,
        name=row.name,
        account_type=normalize_account_type(row.account_type),
        parent_guid=row.parent_guid,
        commodity_guid=row.commodity_guid,
        commodity_scu=int(row.commodity_scu or 0) or 100,
        hidden=coerce_flag(row.hidden),
        placeholder=coerce_flag(row.placeholder),
    )


def commodity_from_row(row) -> Commodity:
    return Commodity(
        guid=row.guid,
        namespace=row.namespace,
        mnemonic=row.mnemonic,
        fraction=int(row.fraction or 0) or 100,
        fullname=row.fullname,
        quote_source=row.quote_source,
    )


def split_from_row(row) -> SplitDraft:
    return SplitDraft(
        guid=row.guid,
        account_guid=row.account_guid,
        value=money_from_columns(row.value_num, row.value_denom),
        quantity=money_from_columns(row.quantity_num, row.quantity_denom),
        memo=row.memo or "",
        action=row.action or "",
        reconcile_state=_reconcile_state(row.reconcile_state),
        reconcile_date=coerce_date(row.reconcile_date),
    )


def money_from_columns(num, denom) -> Money:
    """Build Money from stored columns; a zero denominator reads as zero."""
    denominator = int(denom or 0)
    if denominator == 0:
        return Money.zero()
    if denominator < 0:
        return Money(-int(num or 0), -denominator)
    return Money(int(num or 0), denominator)


def split_params(tx_guid: str, split: SplitDraft) -> dict:
    return {
        "guid": split.guid,
        "tx_guid": tx_guid,
        "account_guid": split.account_guid,
        "memo": split.memo,
        "action": split.action,
        "reconcile_state": ReconcileState(split.reconcile_state).value,
        "reconcile_date": (
            datetime.combine(split.reconcile_date, POST_DATE_TIME)
            if split.reconcile_date
            else None
        ),
        "value_num": split.value.num,
        "value_denom": split.value.denom,
        "quantity_num": split.quantity.num,
        "quantity_denom": split.quantity.denom,
    }


def coerce_date(raw_value) -> date | None:
    if raw_value is None or raw_value == "":
        return None
    if isinstance(raw_value, datetime):
        return raw_value.date()
    if isinstance(raw_value, date):
        return raw_value
    return datetime.fromisoformat(str(raw_value).strip()[:19]).date()


def coerce_datetime(raw_value) -> datetime | None:
    if raw_value is None or raw_value == "":
        return None
    if isinstance(raw_value, datetime):
        return raw_value
    if isinstance(raw_value, date):
        return datetime.combine(raw_value, time())
    return datetime.fromisoformat(str(raw_value).strip()[:19])


def _reconcile_state(raw_value) -> ReconcileState:
    try:
        return ReconcileState(str(raw_value or "n").strip().lower())
    except ValueError:
        return ReconcileState.NOT_RECONCILED


__all__ = [
    "POST_DATE_TIME",
    "select_accounts",
    "select_child_account",
    "select_commodities",
    "select_commodity",
    "select_any_currency",
    "select_transactions",
    "account_from_row",
    "commodity_from_row",
    "split_from_row",
    "money_from_columns",
    "split_params",
    "coerce_date",
    "coerce_datetime",
]
