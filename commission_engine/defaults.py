"""
Reference Compensation Policy

The policy the commission plan ships with. Policy editors start from a copy
of DEFAULT_POLICY_DATA; the engine only ever sees the loaded value.
"""

import copy

from .models import CompensationPolicy

BUSINESS_LINES = (
    "Ventas",
    "Renta",
    "Mantenimiento",
    "Calibración",
    "Capacitación",
    "Supervisión",
    "Proyectos",
    "Otros",
)

DEFAULT_POLICY_DATA = {
    "global_target": 700000,
    "positive_scales": [
        {"end_amount": 750000, "commission_percentage": 105},
        {"end_amount": 850000, "commission_percentage": 110},
        {"end_amount": 1000000, "commission_percentage": 115},
        {"end_amount": None, "commission_percentage": 120},
    ],
    "negative_scales": [
        {"end_amount": 600000, "commission_percentage": 90},
        {"end_amount": 500000, "commission_percentage": 80},
        {"end_amount": 400000, "commission_percentage": 70},
        {"end_amount": None, "commission_percentage": 50},
    ],
    "enable_portfolio_coverage": True,
    "portfolio_activity_target": 50,
    "portfolio_scales": [
        {"start_percentage": 100, "end_percentage": 90, "payout_factor": 1.0},
        {"start_percentage": 89, "end_percentage": 80, "payout_factor": 0.9},
        {"start_percentage": 79, "end_percentage": 0, "payout_factor": 0.8},
    ],
    "enable_closing_coverage": True,
    "closing_percentage_target": 30,
    "closing_scales": [
        {"start_percentage": 100, "end_percentage": 90, "payout_factor": 1.0},
        {"start_percentage": 89, "end_percentage": 80, "payout_factor": 0.9},
        {"start_percentage": 79, "end_percentage": 0, "payout_factor": 0.8},
    ],
    "enable_bonus_new_client": True,
    "enable_bonus_recovered": True,
    "enable_bonus_volume": True,
    "bonus_new_client": {"target_qty": 2, "reward_amount": 500, "min_purchase_amount": 5000},
    "bonus_recovered_client": {"target_qty": 2, "reward_amount": 500, "min_purchase_amount": 5000},
    "bonus_volume_clients": {"target_qty": 5, "reward_amount": 1500},
    "rates": {
        "Ventas": 0.015,
        "Renta": 0.02,
        "Mantenimiento": 0.015,
        "Calibración": 0.015,
        "Capacitación": 0.10,
        "Supervisión": 0.03,
        "Proyectos": 0.03,
        "Otros": 0.00,
    },
    "line_targets": {
        "Ventas": 300000,
        "Renta": 250000,
        "Mantenimiento": 30000,
        "Calibración": 30000,
        "Capacitación": 20000,
        "Supervisión": 40000,
        "Proyectos": 30000,
        "Otros": 0,
    },
}


def default_policy_data() -> dict:
    """A fresh, editable copy of the reference policy data."""
    return copy.deepcopy(DEFAULT_POLICY_DATA)


def default_policy() -> CompensationPolicy:
    return CompensationPolicy.from_dict(DEFAULT_POLICY_DATA)
