from typing import Any


def make_trx(*actions: dict[str, Any], trx_id: str = "trx1", block: int = 1) -> dict[str, Any]:
    return {
        "id": trx_id,
        "block_num": block,
        "block_time": "2019-08-01T10:00:00.000",
        "actions": list(actions),
    }


def token_transfer(sender: str, receiver: str, quantity: str, events: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "code": "cyber.token",
        "receiver": "cyber.token",
        "action": "transfer",
        "args": {"from": sender, "to": receiver, "quantity": quantity, "memo": "hi"},
        "events": events,
    }


def balance_event(account: str, balance: str) -> dict[str, Any]:
    return {"code": "cyber.token", "event": "balance", "args": {"account": account, "balance": balance, "payments": "0.000 GOLOS"}}
