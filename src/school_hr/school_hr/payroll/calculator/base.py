from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import PayrollCalculationInput, PayrollCalculationResult


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate(self, data: PayrollCalculationInput) -> PayrollCalculationResult:
        raise NotImplementedError
