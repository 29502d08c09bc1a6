from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple


@dataclass(frozen=True)
class TaxBracket:
    from_: float
    to: float
    percent: float

    @property
    def upper(self) -> float:
        """``to == 0`` marks the open-ended top bracket."""
        return self.to if self.to > 0 else float("inf")

    def contains(self, amount: float) -> bool:
        lower = self.from_ if self.from_ > 0 else 0.0
        return lower <= amount <= self.upper

    def to_dict(self) -> dict:
        return {"from": self.from_, "to": self.to, "percent": self.percent}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TaxBracket":
        return cls(
            from_=float(data.get("from") or 0),
            to=float(data.get("to") or 0),
            percent=float(data.get("percent") or 0),
        )


DEFAULT_TAX_BRACKETS: Tuple[TaxBracket, ...] = (
    TaxBracket(0, 3750, 0),
    TaxBracket(3751, 6000, 2.5),
    TaxBracket(6001, 8000, 10),
    TaxBracket(8001, 12000, 15),
    TaxBracket(12001, 30000, 20),
    TaxBracket(30001, 0, 25),
)


@dataclass(frozen=True)
class InsuranceSettings:
    enabled: bool = True
    employee_percent: float = 11.0
    employer_percent: float = 18.75


@dataclass(frozen=True)
class TaxSettings:
    is_tax_enabled: bool = True
    # Stored for display; brackets already start at zero percent up to it.
    monthly_exemption_amount: float = 3750.0
    brackets: Tuple[TaxBracket, ...] = DEFAULT_TAX_BRACKETS
    apply_after_insurance: bool = True


@dataclass(frozen=True)
class EmergencyFundSettings:
    enabled: bool = False
    percent: float = 0.0


@dataclass(frozen=True)
class PayrollSettings:
    """Organization-wide payroll settings. Replaced as a whole on save."""

    insurance: InsuranceSettings = field(default_factory=InsuranceSettings)
    taxes: TaxSettings = field(default_factory=TaxSettings)
    emergency_fund: EmergencyFundSettings = field(default_factory=EmergencyFundSettings)

    def to_dict(self) -> dict:
        return {
            "insurance": {
                "enabled": self.insurance.enabled,
                "employeePercent": self.insurance.employee_percent,
                "employerPercent": self.insurance.employer_percent,
            },
            "taxes": {
                "isTaxEnabled": self.taxes.is_tax_enabled,
                "monthlyExemptionAmount": self.taxes.monthly_exemption_amount,
                "brackets": [b.to_dict() for b in self.taxes.brackets],
                "applyAfterInsurance": self.taxes.apply_after_insurance,
            },
            "emergencyFund": {
                "enabled": self.emergency_fund.enabled,
                "percent": self.emergency_fund.percent,
            },
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "PayrollSettings":
        """Merge a (possibly partial) stored object over the defaults."""
        defaults = cls()
        if not data:
            return defaults

        ins = data.get("insurance") or {}
        tax = data.get("taxes") or {}
        ef = data.get("emergencyFund") or {}

        raw_brackets = tax.get("brackets") or []
        brackets = tuple(TaxBracket.from_dict(b) for b in raw_brackets) or defaults.taxes.brackets

        return cls(
            insurance=InsuranceSettings(
                enabled=bool(ins.get("enabled", defaults.insurance.enabled)),
                employee_percent=float(ins.get("employeePercent", defaults.insurance.employee_percent)),
                employer_percent=float(ins.get("employerPercent", defaults.insurance.employer_percent)),
            ),
            taxes=TaxSettings(
                is_tax_enabled=bool(tax.get("isTaxEnabled", defaults.taxes.is_tax_enabled)),
                monthly_exemption_amount=float(
                    tax.get("monthlyExemptionAmount", defaults.taxes.monthly_exemption_amount)
                ),
                brackets=brackets,
                apply_after_insurance=bool(tax.get("applyAfterInsurance", defaults.taxes.apply_after_insurance)),
            ),
            emergency_fund=EmergencyFundSettings(
                enabled=bool(ef.get("enabled", defaults.emergency_fund.enabled)),
                percent=float(ef.get("percent", defaults.emergency_fund.percent)),
            ),
        )
