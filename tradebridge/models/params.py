"""
Typed parameter sets for operations with many recognized keys.

Unified calls still accept a plain ``params`` mapping. Builders split it
into the keys the operation recognizes (typed fields) and everything else
(``extra``), which is passed to the wire untouched. A recognized key can
therefore never be duplicated on the wire or mistaken for a passthrough.

Models:
    OrderParams: Order placement options
    WithdrawParams: Payout fields for bank and crypto withdrawals
"""

from typing import Any, ClassVar, Dict, Mapping, Optional

from pydantic import BaseModel, Field, field_validator


def _split(
    params: Optional[Mapping[str, Any]], wire_keys: Mapping[str, str]
) -> Dict[str, Any]:
    remaining = dict(params or {})
    values: Dict[str, Any] = {}
    for key, name in wire_keys.items():
        value = remaining.pop(key, None)
        if name not in values and value is not None and value != "":
            values[name] = value
    values["extra"] = remaining
    return values


class OrderParams(BaseModel):
    """
    Recognized order placement options.

    Attributes:
        time_in_force: Upper-cased time-in-force ("GTC", "IOC", "FOK", "GTD").
        expire_time: Expiry for GTD orders, passed through as given.
        stop_price: Trigger price, validated by the builder.
        client_order_id: Caller-chosen order id.
        account: Explicit trading account.
        extra: Unrecognized keys, sent as-is.

    Example:
        >>> p = OrderParams.from_params({"stop_price": "99", "foo": 1})
        >>> p.stop_price, p.extra
        ('99', {'foo': 1})
    """

    model_config = {"frozen": True, "extra": "forbid"}

    WIRE_KEYS: ClassVar[Dict[str, str]] = {
        "timeInForce": "time_in_force",
        "expireTime": "expire_time",
        "stopPrice": "stop_price",
        "stop_price": "stop_price",
        "clientOrderId": "client_order_id",
        "account": "account",
    }

    time_in_force: Optional[str] = Field(default=None)
    expire_time: Any = Field(default=None)
    stop_price: Any = Field(default=None)
    client_order_id: Optional[str] = Field(default=None)
    account: Optional[str] = Field(default=None)
    extra: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("time_in_force", mode="before")
    @classmethod
    def upper_time_in_force(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v).upper()

    @field_validator("client_order_id", "account", mode="before")
    @classmethod
    def as_text(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @classmethod
    def from_params(cls, params: Optional[Mapping[str, Any]]) -> "OrderParams":
        """Split a params mapping; ``stopPrice`` wins over ``stop_price``."""
        return cls(**_split(params, cls.WIRE_KEYS))


class WithdrawParams(BaseModel):
    """
    Payout fields.

    Every value is kept as text because the payout signature is computed
    over the exact strings sent on the wire.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    WIRE_KEYS: ClassVar[Dict[str, str]] = {
        "requestTime": "request_time",
        "commission": "commission",
        "paymentType": "payment_type",
        "beneficiaryAccount": "beneficiary_account",
        "beneficiaryAccountType": "beneficiary_account_type",
        "beneficiaryName": "beneficiary_name",
        "beneficiarySwiftCode": "beneficiary_swift_code",
        "intermediaryAccount": "intermediary_account",
        "intermediarySwiftCode": "intermediary_swift_code",
        "account": "account",
    }

    request_time: Optional[str] = Field(default=None)
    commission: Optional[str] = Field(default=None)
    payment_type: Optional[str] = Field(default=None)
    beneficiary_account: Optional[str] = Field(default=None)
    beneficiary_account_type: Optional[str] = Field(default=None)
    beneficiary_name: Optional[str] = Field(default=None)
    beneficiary_swift_code: Optional[str] = Field(default=None)
    intermediary_account: Optional[str] = Field(default=None)
    intermediary_swift_code: Optional[str] = Field(default=None)
    account: Optional[str] = Field(default=None)
    extra: Dict[str, Any] = Field(default_factory=dict)

    @field_validator(
        "request_time",
        "commission",
        "payment_type",
        "beneficiary_account",
        "beneficiary_account_type",
        "beneficiary_name",
        "beneficiary_swift_code",
        "intermediary_account",
        "intermediary_swift_code",
        "account",
        mode="before",
    )
    @classmethod
    def as_text(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @classmethod
    def from_params(cls, params: Optional[Mapping[str, Any]]) -> "WithdrawParams":
        return cls(**_split(params, cls.WIRE_KEYS))

    def to_wire(self) -> Dict[str, Any]:
        """Wire form of the set fields (without ``account``) plus extra keys."""
        wire = {
            key: getattr(self, name)
            for key, name in self.WIRE_KEYS.items()
            if name != "account" and getattr(self, name) is not None
        }
        wire.update(self.extra)
        return wire
