"""
Two-Stage Form Validation

Validation of what the user typed, before anything reaches the ledger.

STAGE 1 - REQUIRED FIELDS:
- Amount present and positive
- Category and account selected and known
Errors here block submission.

STAGE 2 - SEMANTIC CHECKS (only if stage 1 passes):
- Category meant for the other transaction type
- Date far in the future
These are warnings: the user may still submit.

IMPORTANT: Validation never rewrites the transaction form. The one
correction it makes is on the account form, where a negative opening
balance is clamped to zero, and it says so with a warning.

Solvency (INSUFFICIENT_FUNDS, NEGATIVE_BALANCE) is NOT checked here;
the ledger engine is the only authority on balances.
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Sequence

from pydantic import BaseModel, Field

from gastozen.config import get_settings
from gastozen.models import Account, Category, TransactionFormValues


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'type_mismatch')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """Result of validating one form submission."""

    schema_valid: bool
    semantic_valid: bool = True
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[str]:
        return [i.message for i in self.issues if i.severity == "warning"]

    @property
    def can_submit(self) -> bool:
        return not self.errors


class AccountFormResult(ValidationResult):
    """Account form outcome, with the balance to store when it can be submitted."""

    balance: Optional[Decimal] = None


class TransactionFormValidator:
    """Validates the transaction form through the two-stage pipeline."""

    def __init__(self, future_date_tolerance_days: Optional[int] = None):
        if future_date_tolerance_days is None:
            future_date_tolerance_days = get_settings().app.future_date_tolerance_days
        self._future_date_tolerance_days = future_date_tolerance_days

    def _validate_required(
        self,
        values: TransactionFormValues,
        categories: Sequence[Category],
        accounts: Sequence[Account],
    ) -> tuple[bool, list[ValidationIssue]]:
        """Stage 1. Returns: (is_valid, list_of_issues)"""
        issues = []

        if values.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="El monto debe ser mayor que cero.",
                severity="error",
            ))

        if not values.category_id:
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="missing",
                message="Selecciona una categoría.",
                severity="error",
            ))
        elif not any(c.id == values.category_id for c in categories):
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="unknown",
                message="La categoría seleccionada no existe.",
                severity="error",
                suggested_fix="Elige otra categoría de la lista",
            ))

        if not values.account_id:
            issues.append(ValidationIssue(
                field="account_id",
                issue_type="missing",
                message="Selecciona una cuenta.",
                severity="error",
                suggested_fix="Crea una cuenta si todavía no tienes ninguna",
            ))
        elif not any(a.id == values.account_id for a in accounts):
            issues.append(ValidationIssue(
                field="account_id",
                issue_type="unknown",
                message="La cuenta seleccionada no existe.",
                severity="error",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_semantic(
        self,
        values: TransactionFormValues,
        categories: Sequence[Category],
        today: dt.date,
    ) -> tuple[bool, list[ValidationIssue]]:
        """Stage 2. Only warnings, so it never invalidates the form."""
        issues = []

        category = next(c for c in categories if c.id == values.category_id)
        if category.type != values.type:
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="type_mismatch",
                message=(
                    f"La categoría '{category.name}' es de tipo "
                    f"{category.type.label.lower()}, pero la transacción es un "
                    f"{values.type.label.lower()}."
                ),
                severity="warning",
                suggested_fix="Verifica el tipo o la categoría",
            ))

        max_future_date = today + dt.timedelta(days=self._future_date_tolerance_days)
        if values.date > max_future_date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"La fecha ({values.date.isoformat()}) está en el futuro.",
                severity="warning",
                suggested_fix="Verifica que la fecha sea correcta",
            ))

        return True, issues

    def validate(
        self,
        values: TransactionFormValues,
        categories: Sequence[Category],
        accounts: Sequence[Account],
        today: Optional[dt.date] = None,
    ) -> ValidationResult:
        """Run the full pipeline. Stage 2 is skipped if stage 1 fails."""
        schema_valid, issues = self._validate_required(values, categories, accounts)

        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(
                values, categories, today or dt.date.today()
            )
            issues.extend(semantic_issues)

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            issues=issues,
        )


class AccountFormValidator:
    """
    Validates the account form.

    A new account's negative opening balance is clamped to 0 (warning);
    an edited account with a negative balance is an error.
    """

    def validate(
        self,
        name: str,
        raw_balance: Any,
        is_new: bool,
    ) -> AccountFormResult:
        issues = []

        if not (name or "").strip():
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="El nombre de la cuenta es obligatorio.",
                severity="error",
            ))

        balance: Optional[Decimal] = None
        try:
            balance = Decimal(str(raw_balance).strip())
            if not balance.is_finite():
                raise InvalidOperation
        except (InvalidOperation, ValueError):
            balance = None
            issues.append(ValidationIssue(
                field="balance",
                issue_type="invalid_format",
                message="El saldo debe ser un número válido.",
                severity="error",
            ))

        if balance is not None and balance < 0:
            if is_new:
                issues.append(ValidationIssue(
                    field="balance",
                    issue_type="clamped",
                    message="El saldo inicial no puede ser negativo; se usará 0.",
                    severity="warning",
                ))
                balance = Decimal("0")
            else:
                issues.append(ValidationIssue(
                    field="balance",
                    issue_type="invalid_value",
                    message="El saldo de una cuenta no puede ser negativo.",
                    severity="error",
                ))

        schema_valid = not any(issue.severity == "error" for issue in issues)
        return AccountFormResult(
            schema_valid=schema_valid,
            issues=issues,
            balance=balance if schema_valid else None,
        )


def get_user_friendly_summary(result: ValidationResult) -> str:
    """What we show under the form."""
    if result.can_submit and not result.warnings:
        return "✅ Todo en orden."

    lines = []

    if result.errors:
        lines.append("❌ Corrige lo siguiente:")
        for issue in result.errors:
            lines.append(f"   • {issue.message}")
            if issue.suggested_fix:
                lines.append(f"     💡 {issue.suggested_fix}")

    if result.warnings:
        if lines:
            lines.append("")
        lines.append("⚠️ Revisa lo siguiente:")
        for warning in result.warnings:
            lines.append(f"   • {warning}")

    return "\n".join(lines)
