"""
Domain Models for the Commission Engine

These dataclasses provide type-safe representations of all business entities.
All monetary values use Decimal for precision.

Policy and invoice models are frozen: a CompensationPolicy is a value type and
is never mutated while a batch is being processed.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Mapping

POSITIVE_SCALE_COUNT = 4
NEGATIVE_SCALE_COUNT = 4
COVERAGE_SCALE_COUNT = 3

STATUS_PENDING = "Pending"


def to_decimal(value) -> Decimal:
    """Convert a JSON number (or numeric string) to Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid number: {value!r}") from None


def parse_date(value) -> date:
    """Accept a date, a datetime or an ISO 'YYYY-MM-DD' string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def _get(data: dict, key: str, camel_key: str, default=None):
    # Policy editor payloads use camelCase keys; snake_case takes priority.
    if key in data:
        return data[key]
    return data.get(camel_key, default)


# =============================================================================
# POLICY MODELS
# =============================================================================


@dataclass(frozen=True)
class Bracket:
    """A single tier in a financial (sales attainment) scale."""

    end_amount: Decimal | None  # None = unbounded, terminal bracket only
    commission_percentage: Decimal  # 105 = 105%

    @classmethod
    def from_dict(cls, data: dict) -> "Bracket":
        end = _get(data, "end_amount", "endAmount")
        return cls(
            end_amount=to_decimal(end) if end is not None else None,
            commission_percentage=to_decimal(_get(data, "commission_percentage", "commissionPercentage")),
        )


@dataclass(frozen=True)
class CoverageBracket:
    """A tier in a coverage scale. Ranges are listed in descending order."""

    start_percentage: Decimal
    end_percentage: Decimal
    payout_factor: Decimal

    def contains(self, attainment: Decimal) -> bool:
        return self.end_percentage <= attainment <= self.start_percentage

    @classmethod
    def from_dict(cls, data: dict) -> "CoverageBracket":
        return cls(
            start_percentage=to_decimal(_get(data, "start_percentage", "startPercentage")),
            end_percentage=to_decimal(_get(data, "end_percentage", "endPercentage")),
            payout_factor=to_decimal(_get(data, "payout_factor", "payoutFactor")),
        )


@dataclass(frozen=True)
class BonusRule:
    """Per-invoice bonus for new or recovered clients."""

    target_qty: int
    reward_amount: Decimal
    min_purchase_amount: Decimal

    @classmethod
    def from_dict(cls, data: dict) -> "BonusRule":
        return cls(
            target_qty=int(_get(data, "target_qty", "targetQty", 0)),
            reward_amount=to_decimal(_get(data, "reward_amount", "rewardAmount", 0)),
            min_purchase_amount=to_decimal(_get(data, "min_purchase_amount", "minPurchaseAmount", 0)),
        )


@dataclass(frozen=True)
class VolumeBonusRule:
    """Flat batch-level bonus keyed to a distinct new-client count."""

    target_qty: int
    reward_amount: Decimal

    @classmethod
    def from_dict(cls, data: dict) -> "VolumeBonusRule":
        return cls(
            target_qty=int(_get(data, "target_qty", "targetQty", 0)),
            reward_amount=to_decimal(_get(data, "reward_amount", "rewardAmount", 0)),
        )


@dataclass(frozen=True)
class CompensationPolicy:
    """
    Versioned compensation rules for one calculation.

    Bracket tables are stored as tuples with a fixed arity that is checked on
    construction. Threshold ordering is checked by PolicyValidator.
    """

    global_target: Decimal
    positive_scales: tuple[Bracket, ...]
    negative_scales: tuple[Bracket, ...]
    portfolio_scales: tuple[CoverageBracket, ...]
    closing_scales: tuple[CoverageBracket, ...]
    enable_portfolio_coverage: bool = False
    portfolio_activity_target: Decimal = Decimal("0")
    enable_closing_coverage: bool = False
    closing_percentage_target: Decimal = Decimal("0")
    enable_bonus_new_client: bool = False
    enable_bonus_recovered: bool = False
    enable_bonus_volume: bool = False
    bonus_new_client: BonusRule = BonusRule(0, Decimal("0"), Decimal("0"))
    bonus_recovered_client: BonusRule = BonusRule(0, Decimal("0"), Decimal("0"))
    bonus_volume_clients: VolumeBonusRule = VolumeBonusRule(0, Decimal("0"))
    rates: Mapping[str, Decimal] = field(default_factory=dict)
    line_targets: Mapping[str, Decimal] = field(default_factory=dict)

    def __post_init__(self):
        # Lists and dicts are copied into read-only containers
        for name in ("positive_scales", "negative_scales", "portfolio_scales", "closing_scales"):
            object.__setattr__(self, name, tuple(getattr(self, name)))
        for name in ("rates", "line_targets"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

        _check_financial_table("positive_scales", self.positive_scales, POSITIVE_SCALE_COUNT)
        _check_financial_table("negative_scales", self.negative_scales, NEGATIVE_SCALE_COUNT)
        _check_arity("portfolio_scales", self.portfolio_scales, COVERAGE_SCALE_COUNT)
        _check_arity("closing_scales", self.closing_scales, COVERAGE_SCALE_COUNT)

    def rate_for(self, business_line: str) -> Decimal:
        """Commission rate for a business line; unknown lines earn nothing."""
        return self.rates.get(business_line, Decimal("0"))

    @classmethod
    def from_dict(cls, data: dict) -> "CompensationPolicy":
        rates = data.get("rates") or {}
        line_targets = _get(data, "line_targets", "lineTargets", {}) or {}
        return cls(
            global_target=to_decimal(_get(data, "global_target", "globalTarget")),
            positive_scales=tuple(Bracket.from_dict(b) for b in _get(data, "positive_scales", "positiveScales")),
            negative_scales=tuple(Bracket.from_dict(b) for b in _get(data, "negative_scales", "negativeScales")),
            portfolio_scales=tuple(
                CoverageBracket.from_dict(b) for b in _get(data, "portfolio_scales", "portfolioScales")
            ),
            closing_scales=tuple(
                CoverageBracket.from_dict(b) for b in _get(data, "closing_scales", "closingScales")
            ),
            enable_portfolio_coverage=bool(_get(data, "enable_portfolio_coverage", "enablePortfolioCoverage", False)),
            portfolio_activity_target=to_decimal(
                _get(data, "portfolio_activity_target", "portfolioActivityTarget", 0)
            ),
            enable_closing_coverage=bool(_get(data, "enable_closing_coverage", "enableClosingCoverage", False)),
            closing_percentage_target=to_decimal(
                _get(data, "closing_percentage_target", "closingPercentageTarget", 0)
            ),
            enable_bonus_new_client=bool(_get(data, "enable_bonus_new_client", "enableBonusNewClient", False)),
            enable_bonus_recovered=bool(_get(data, "enable_bonus_recovered", "enableBonusRecovered", False)),
            enable_bonus_volume=bool(_get(data, "enable_bonus_volume", "enableBonusVolume", False)),
            bonus_new_client=BonusRule.from_dict(_get(data, "bonus_new_client", "bonusNewClient", {})),
            bonus_recovered_client=BonusRule.from_dict(
                _get(data, "bonus_recovered_client", "bonusRecoveredClient", {})
            ),
            bonus_volume_clients=VolumeBonusRule.from_dict(
                _get(data, "bonus_volume_clients", "bonusVolumeClients", {})
            ),
            rates={line: to_decimal(rate) for line, rate in rates.items()},
            line_targets={line: to_decimal(target) for line, target in line_targets.items()},
        )


def _check_arity(name: str, table: tuple, expected: int) -> None:
    if len(table) != expected:
        raise ValueError(f"{name} must have exactly {expected} brackets, got: {len(table)}")


def _check_financial_table(name: str, table: tuple[Bracket, ...], expected: int) -> None:
    _check_arity(name, table, expected)
    for i, bracket in enumerate(table[:-1]):
        if bracket.end_amount is None:
            raise ValueError(f"{name}[{i}] must have an end_amount; only the last bracket is unbounded")
    if table[-1].end_amount is not None:
        raise ValueError(f"{name}[{expected - 1}] must be unbounded (end_amount=None)")


# =============================================================================
# INVOICE / BATCH INPUT MODELS
# =============================================================================


@dataclass(frozen=True)
class Invoice:
    """A sales invoice for the period being evaluated."""

    id: str
    customer_id: str
    date: date
    amount: Decimal
    business_line: str
    is_new_client: bool = False
    is_recovered_client: bool = False
    sales_rep_id: str | None = None
    territory: str | None = None
    # Informational, carried through to the commission record
    currency: str = "MXN"
    is_paid: bool = False
    sales_rep_name: str | None = None
    manager_name: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Invoice":
        return cls(
            id=str(_get(data, "id", "docNum")),
            customer_id=str(_get(data, "customer_id", "customerName")),
            date=parse_date(_get(data, "date", "docDate")),
            amount=to_decimal(_get(data, "amount", "docTotal")),
            business_line=_get(data, "business_line", "businessLine"),
            is_new_client=bool(_get(data, "is_new_client", "isNewClient", False)),
            is_recovered_client=bool(_get(data, "is_recovered_client", "isRecoveredClient", False)),
            sales_rep_id=_get(data, "sales_rep_id", "salesRepId"),
            territory=data.get("territory"),
            currency=data.get("currency", "MXN"),
            is_paid=bool(_get(data, "is_paid", "isPaid", False)),
            sales_rep_name=_get(data, "sales_rep_name", "salesRepName"),
            manager_name=_get(data, "manager_name", "managerName"),
        )


@dataclass(frozen=True)
class BatchInput:
    """Complete input for processing one (period, policy, invoice set) batch."""

    invoices: tuple[Invoice, ...]
    policy: CompensationPolicy
    period_sales: Decimal | None = None  # None = sum of invoice amounts
    active_customers: Decimal = Decimal("0")
    closing_rate: Decimal = Decimal("0")

    def __post_init__(self):
        object.__setattr__(self, "invoices", tuple(self.invoices))

    @property
    def effective_period_sales(self) -> Decimal:
        if self.period_sales is not None:
            return self.period_sales
        return sum((inv.amount for inv in self.invoices), Decimal("0"))

    @classmethod
    def from_dict(cls, data: dict) -> "BatchInput":
        period_sales = data.get("period_sales")
        return cls(
            invoices=[Invoice.from_dict(i) for i in data.get("invoices", [])],
            policy=CompensationPolicy.from_dict(data["policy"]),
            period_sales=to_decimal(period_sales) if period_sales is not None else None,
            active_customers=to_decimal(data.get("active_customers", 0)),
            closing_rate=to_decimal(data.get("closing_rate", 0)),
        )


# =============================================================================
# CRM / OPPORTUNITY MODELS (KPI sources)
# =============================================================================


@dataclass(frozen=True)
class ClientActivity:
    """CRM activity logged against one client during the period."""

    client_id: str
    client_name: str
    calls: int = 0
    emails: int = 0
    visits: int = 0
    meetings: int = 0

    @property
    def total_activities(self) -> int:
        return self.calls + self.emails + self.visits + self.meetings

    @classmethod
    def from_dict(cls, data: dict) -> "ClientActivity":
        return cls(
            client_id=str(_get(data, "client_id", "clientId")),
            client_name=_get(data, "client_name", "clientName"),
            calls=int(data.get("calls", 0)),
            emails=int(data.get("emails", 0)),
            visits=int(data.get("visits", 0)),
            meetings=int(data.get("meetings", 0)),
        )


OPPORTUNITY_WON = "Won"
OPPORTUNITY_LOST = "Lost"
OPPORTUNITY_OPEN = "Open"


@dataclass(frozen=True)
class Opportunity:
    """A sales opportunity; won opportunities are linked to an invoice."""

    opp_id: str
    client_name: str
    status: str  # 'Won', 'Lost' or 'Open'
    amount: Decimal = Decimal("0")
    invoice_number: str | None = None

    @property
    def is_won(self) -> bool:
        return self.status == OPPORTUNITY_WON

    @classmethod
    def from_dict(cls, data: dict) -> "Opportunity":
        invoice_number = _get(data, "invoice_number", "invoiceNumber")
        return cls(
            opp_id=str(_get(data, "opp_id", "oppId")),
            client_name=_get(data, "client_name", "clientName"),
            status=data["status"],
            amount=to_decimal(data.get("amount", 0)),
            invoice_number=str(invoice_number) if invoice_number is not None else None,
        )


# =============================================================================
# OUTPUT / RESULT MODELS
# =============================================================================


@dataclass(frozen=True)
class CommissionFactors:
    """Multipliers resolved once per batch."""

    financial: Decimal = Decimal("1")
    portfolio: Decimal = Decimal("1")
    closing: Decimal = Decimal("1")

    @property
    def combined(self) -> Decimal:
        return self.financial * self.portfolio * self.closing


@dataclass(frozen=True)
class CommissionRecord:
    """Commission computed for a single invoice. Never mutated after creation."""

    invoice: Invoice
    base_date: date
    payment_date: date
    applied_rate: Decimal
    base_commission_amount: Decimal
    bonus_amount: Decimal
    final_commission_amount: Decimal
    financial_factor: Decimal
    portfolio_factor: Decimal
    closing_factor: Decimal
    status: str = STATUS_PENDING

    @property
    def penalty_factor(self) -> Decimal:
        return self.financial_factor * self.portfolio_factor * self.closing_factor

    @property
    def invoice_id(self) -> str:
        return self.invoice.id

    @property
    def customer_id(self) -> str:
        return self.invoice.customer_id

    @property
    def business_line(self) -> str:
        return self.invoice.business_line

    @property
    def amount(self) -> Decimal:
        return self.invoice.amount


@dataclass
class BatchResult:
    """Final output of batch processing."""

    records: list[CommissionRecord]
    volume_bonus: Decimal
    factors: CommissionFactors
    period_sales: Decimal
    distinct_new_clients: int = 0

    @property
    def total_base_commission(self) -> Decimal:
        return sum((r.base_commission_amount for r in self.records), Decimal("0"))

    @property
    def total_final_commission(self) -> Decimal:
        return sum((r.final_commission_amount for r in self.records), Decimal("0"))

    @property
    def total_payable(self) -> Decimal:
        return self.total_final_commission + self.volume_bonus
