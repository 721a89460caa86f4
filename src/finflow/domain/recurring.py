"""Recurring payment domain service and due-payment processing."""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Optional, Union

from finflow.database.base import Database
from finflow.domain.entities import (
    DEFAULT_CATEGORY_ICON,
    ProcessingReport,
    RecurringPayment as RecurringPaymentEntity,
    RecurringPaymentSummary,
    TransactionType,
)
from finflow.domain.errors import (
    BatchError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
    account_not_found,
    recurring_payment_not_found,
    unknown_frequency,
)
from finflow.domain.schedule import (
    is_known_frequency,
    monthly_equivalent,
    next_payment_date,
    start_of_day,
)
from finflow.domain.transaction import TransactionService
from finflow.logging_config import get_logger

logger = get_logger(__name__)

UPCOMING_WINDOW_DAYS = 7


class RecurringPaymentService:
    """Service for managing recurring payments and posting them when due."""

    def __init__(self, db: Database):
        """Initialize recurring payment service.

        Args:
            db: Database instance
        """
        self.db = db
        self.transactions = TransactionService(db)

    def create_recurring_payment(
        self,
        user_id: str,
        name: str,
        amount: Decimal,
        category: str,
        account_id: int,
        frequency: str,
        start_date: date,
        end_date: Optional[date] = None,
        description: str = "",
        category_icon: str = "",
        auto_create_transaction: bool = True,
        reminder_days: int = 3,
    ) -> int:
        """Create a recurring payment. The first due date is the start date.

        Args:
            user_id: Owner
            name: Display name
            amount: Positive amount posted each period
            category: Category of the posted transactions
            account_id: Account the payments are drawn from
            frequency: daily, weekly, monthly or yearly
            start_date: First due date
            end_date: Optional last day a payment may fall on
            description: Optional description for posted transactions
            category_icon: Optional display hint
            auto_create_transaction: Whether the scheduler posts it automatically
            reminder_days: Days of advance notice for reminders

        Returns:
            Recurring payment ID

        Raises:
            ValidationError: If any field is invalid
            NotFoundError: If the account doesn't exist for this user
        """
        if not name or not name.strip():
            raise ValidationError("Recurring payment name cannot be empty")
        if amount <= 0:
            raise ValidationError("Recurring payment amount must be positive")
        if not category or not category.strip():
            raise ValidationError("Recurring payment category cannot be empty")
        if not is_known_frequency(frequency):
            raise ValidationError(unknown_frequency(frequency))
        if end_date is not None and end_date < start_date:
            raise ValidationError("End date cannot be before start date")
        if reminder_days < 0:
            raise ValidationError("Reminder days cannot be negative")
        self._require_account(account_id, user_id)

        payment_id = self.db.create_recurring_payment(
            user_id=user_id,
            name=name.strip(),
            amount=amount,
            category=category.strip(),
            account_id=account_id,
            frequency=getattr(frequency, "value", frequency),
            start_date=start_date,
            next_payment_date=start_date,
            end_date=end_date,
            description=description,
            category_icon=category_icon,
            is_active=True,
            auto_create_transaction=auto_create_transaction,
            reminder_days=reminder_days,
        )
        logger.info("Created recurring payment %s '%s' (%s)", payment_id, name, frequency)
        return payment_id

    def get_recurring_payment(self, payment_id: int) -> Optional[RecurringPaymentEntity]:
        """Get recurring payment by ID.

        Args:
            payment_id: Recurring payment ID

        Returns:
            Recurring payment entity or None if not found
        """
        return self.db.get_recurring_payment(payment_id)

    def list_recurring_payments(self, user_id: str) -> list[RecurringPaymentEntity]:
        """List a user's recurring payments, soonest first."""
        return self.db.list_recurring_payments(user_id)

    def list_active_recurring_payments(self, user_id: str) -> list[RecurringPaymentEntity]:
        """List a user's active recurring payments, soonest first."""
        return self.db.list_recurring_payments(user_id, active_only=True)

    def update_recurring_payment(
        self,
        payment_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        amount: Optional[Decimal] = None,
        category: Optional[str] = None,
        category_icon: Optional[str] = None,
        account_id: Optional[int] = None,
        frequency: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        auto_create_transaction: Optional[bool] = None,
        reminder_days: Optional[int] = None,
    ) -> None:
        """Update a recurring payment's details.

        The next and last payment dates and the paid totals are owned by the
        rollforward and cannot be set. Changing the frequency re-derives the
        next date from the last payment (or the start date before the first
        one). The start date can only change before the first payment.

        Raises:
            NotFoundError: If the payment or new account doesn't exist
            ValidationError: If a new value is invalid
            ConflictError: If the start date changes after a payment was made
        """
        payment = self._require_payment(payment_id)
        fields: dict[str, Any] = {}

        if name is not None:
            if not name.strip():
                raise ValidationError("Recurring payment name cannot be empty")
            fields["name"] = name.strip()
        if description is not None:
            fields["description"] = description
        if amount is not None:
            if amount <= 0:
                raise ValidationError("Recurring payment amount must be positive")
            fields["amount"] = amount
        if category is not None:
            if not category.strip():
                raise ValidationError("Recurring payment category cannot be empty")
            fields["category"] = category.strip()
        if category_icon is not None:
            fields["category_icon"] = category_icon
        if account_id is not None:
            self._require_account(account_id, payment.user_id)
            fields["account_id"] = account_id
        if auto_create_transaction is not None:
            fields["auto_create_transaction"] = auto_create_transaction
        if reminder_days is not None:
            if reminder_days < 0:
                raise ValidationError("Reminder days cannot be negative")
            fields["reminder_days"] = reminder_days

        new_frequency = payment.frequency
        if frequency is not None:
            if not is_known_frequency(frequency):
                raise ValidationError(unknown_frequency(frequency))
            new_frequency = getattr(frequency, "value", frequency)
            fields["frequency"] = new_frequency

        new_start = payment.start_date
        if start_date is not None and start_date != payment.start_date:
            if payment.last_payment_date is not None:
                raise ConflictError(
                    f"Cannot change start date of recurring payment {payment_id} "
                    "after a payment was made"
                )
            new_start = start_date
            fields["start_date"] = start_date

        if "frequency" in fields or "start_date" in fields:
            if payment.last_payment_date is None:
                fields["next_payment_date"] = new_start
            else:
                fields["next_payment_date"] = next_payment_date(
                    payment.last_payment_date, new_frequency
                )

        new_end = payment.end_date
        if end_date is not None:
            new_end = end_date
            fields["end_date"] = end_date
        if new_end is not None and new_end < new_start:
            raise ValidationError("End date cannot be before start date")

        if not fields:
            return
        next_date = fields.get("next_payment_date", payment.next_payment_date)
        if new_end is not None and next_date > new_end:
            fields["is_active"] = False

        self.db.update_recurring_payment(payment_id, **fields)
        logger.info("Updated recurring payment %s", payment_id)

    def delete_recurring_payment(self, payment_id: int) -> None:
        """Delete a recurring payment. Transactions it posted are kept.

        Raises:
            NotFoundError: If the payment doesn't exist
        """
        self._require_payment(payment_id)
        self.db.delete_recurring_payment(payment_id)
        logger.info("Deleted recurring payment %s", payment_id)

    def toggle_active(self, payment_id: int) -> bool:
        """Pause or resume a recurring payment.

        Returns:
            The new active state

        Raises:
            NotFoundError: If the payment doesn't exist
            ConflictError: If resuming a payment whose schedule has ended
        """
        payment = self._require_payment(payment_id)
        is_active = not payment.is_active
        if (
            is_active
            and payment.end_date is not None
            and payment.next_payment_date > payment.end_date
        ):
            raise ConflictError(
                f"Recurring payment {payment_id} ended on {payment.end_date} and cannot be resumed"
            )
        self.db.update_recurring_payment(payment_id, is_active=is_active)
        logger.info(
            "%s recurring payment %s", "Resumed" if is_active else "Paused", payment_id
        )
        return is_active

    def get_upcoming_payments(
        self, user_id: str, today: Optional[date] = None, days: int = UPCOMING_WINDOW_DAYS
    ) -> list[RecurringPaymentEntity]:
        """List active payments falling due within the next few days, today included."""
        today = start_of_day(today or date.today())
        horizon = today + timedelta(days=days)
        return [
            p
            for p in self.db.list_recurring_payments(user_id, active_only=True)
            if today <= p.next_payment_date <= horizon
        ]

    def get_overdue_payments(
        self, user_id: str, today: Optional[date] = None
    ) -> list[RecurringPaymentEntity]:
        """List active payments whose due date has passed."""
        today = start_of_day(today or date.today())
        return [
            p
            for p in self.db.list_recurring_payments(user_id, active_only=True)
            if p.next_payment_date < today
        ]

    def get_summary(self, user_id: str, today: Optional[date] = None) -> RecurringPaymentSummary:
        """Summarise a user's active recurring payments.

        Returns:
            Monthly and yearly cost estimates plus active, upcoming and overdue counts
        """
        active = self.db.list_recurring_payments(user_id, active_only=True)
        monthly = sum(
            (monthly_equivalent(p.amount, p.frequency) for p in active), Decimal("0")
        )
        monthly = monthly.quantize(Decimal("0.01"))
        return RecurringPaymentSummary(
            total_monthly_amount=monthly,
            total_yearly_amount=monthly * 12,
            active_count=len(active),
            upcoming_count=len(self.get_upcoming_payments(user_id, today)),
            overdue_count=len(self.get_overdue_payments(user_id, today)),
        )

    def get_due_payments(
        self, user_id: Optional[str], now: Union[date, datetime, None] = None
    ) -> list[RecurringPaymentEntity]:
        """List payments the scheduler should post at now.

        Due means active, auto-posting and next payment date on or before
        now's calendar day.

        Args:
            user_id: Owner, or None for every user
            now: Processing time (defaults to now)
        """
        as_of = start_of_day(now or datetime.now())
        return self.db.list_due_recurring_payments(as_of, user_id=user_id)

    def post_payment(self, payment: RecurringPaymentEntity) -> int:
        """Post one occurrence of a recurring payment and roll it forward.

        The transaction is dated on the due date, not on the processing day,
        and goes through the normal creation path so the account and budgets
        move exactly once. The transaction and the rollforward commit together.

        Args:
            payment: Payment to post

        Returns:
            ID of the created transaction

        Raises:
            ValidationError: If the stored payment is malformed
            NotFoundError: If its account no longer exists
            StoreWriteError: If a write fails
        """
        if not is_known_frequency(payment.frequency):
            raise ValidationError(unknown_frequency(payment.frequency))
        self._require_account(payment.account_id, payment.user_id)

        with self.db.atomic():
            transaction_id = self.transactions.create_transaction(
                user_id=payment.user_id,
                account_id=payment.account_id,
                amount=payment.amount,
                # Recurring payments are bills; amounts are stored positive, so
                # posting by sign would turn every bill into income.
                type=TransactionType.EXPENSE.value,
                category=payment.category,
                date=payment.next_payment_date,
                description=payment.description or payment.name,
                category_icon=payment.category_icon or DEFAULT_CATEGORY_ICON,
            )
            self._roll_forward(payment, paid=True)

        logger.info(
            "Posted recurring payment %s '%s' as transaction %s",
            payment.id,
            payment.name,
            transaction_id,
        )
        return transaction_id

    def process_payment(self, payment_id: int) -> int:
        """Post a payment on demand, whether or not it posts automatically.

        Returns:
            ID of the created transaction

        Raises:
            NotFoundError: If the payment or its account doesn't exist
            ConflictError: If the payment is inactive
        """
        payment = self._require_payment(payment_id)
        if not payment.is_active:
            raise ConflictError(f"Recurring payment {payment_id} is not active")
        return self.post_payment(payment)

    def skip_payment(self, payment_id: int) -> date:
        """Move a payment to its next due date without posting anything.

        Returns:
            The new next payment date

        Raises:
            NotFoundError: If the payment doesn't exist
            ValidationError: If the stored frequency is unknown
            ConflictError: If the payment is inactive
        """
        payment = self._require_payment(payment_id)
        if not payment.is_active:
            raise ConflictError(f"Recurring payment {payment_id} is not active")
        if not is_known_frequency(payment.frequency):
            raise ValidationError(unknown_frequency(payment.frequency))

        new_next = self._roll_forward(payment, paid=False)
        logger.info("Skipped recurring payment %s to %s", payment_id, new_next)
        return new_next

    def process_due_payments(
        self, user_id: Optional[str], now: Union[date, datetime, None] = None
    ) -> ProcessingReport:
        """Post every due payment of a user, one at a time.

        A failing payment is logged and left due for the next run; the rest
        of the batch still runs. Posted payments are never rolled back.
        Nothing guards against posting twice if a run is repeated before the
        due date moves.

        Args:
            user_id: Owner, or None for every user
            now: Processing time (defaults to now)

        Returns:
            ProcessingReport of posted and failed payment IDs

        Raises:
            BatchError: If the due payments cannot be fetched
        """
        report = ProcessingReport()
        try:
            due = self.get_due_payments(user_id, now)
        except Exception as e:
            raise BatchError(f"Could not load due recurring payments: {e}") from e

        logger.info(
            "Processing %d due recurring payment(s) for %s",
            len(due),
            user_id if user_id is not None else "all users",
        )
        for payment in due:
            try:
                transaction_id = self.post_payment(payment)
            except DomainError as e:
                logger.warning(
                    "Skipped recurring payment %s '%s': %s", payment.id, payment.name, e
                )
                report.failed[payment.id] = str(e)
                continue
            except Exception as e:
                logger.error(
                    "Error processing recurring payment %s '%s': %s",
                    payment.id,
                    payment.name,
                    e,
                    exc_info=True,
                )
                report.failed[payment.id] = str(e)
                continue
            report.processed.append(payment.id)
            report.transaction_ids.append(transaction_id)

        logger.info(
            "Finished processing recurring payments: %d posted, %d failed",
            report.processed_count,
            report.failed_count,
        )
        return report

    def process_all_due_payments(self, now: Union[date, datetime, None] = None) -> ProcessingReport:
        """Post every due payment of every user."""
        return self.process_due_payments(None, now)

    def _roll_forward(self, payment: RecurringPaymentEntity, paid: bool) -> date:
        new_next = next_payment_date(payment.next_payment_date, payment.frequency)
        fields: dict[str, Any] = {
            "last_payment_date": payment.next_payment_date,
            "next_payment_date": new_next,
        }
        if paid:
            fields["total_paid"] = payment.total_paid + payment.amount
            fields["payment_count"] = payment.payment_count + 1
        if payment.end_date is not None and new_next > payment.end_date:
            fields["is_active"] = False
            logger.info("Recurring payment %s reached its end date", payment.id)
        self.db.update_recurring_payment(payment.id, **fields)
        return new_next

    def _require_payment(self, payment_id: int) -> RecurringPaymentEntity:
        payment = self.db.get_recurring_payment(payment_id)
        if payment is None:
            raise NotFoundError(recurring_payment_not_found(payment_id))
        return payment

    def _require_account(self, account_id: int, user_id: str) -> None:
        account = self.db.get_account(account_id)
        if account is None or account.user_id != user_id:
            raise NotFoundError(account_not_found(account_id))
