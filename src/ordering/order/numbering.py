"""Order numbers: ``YYMMDD`` followed by the day's running count, zero-padded to three digits.

The count lives in an ``OrderNumberSequence`` record per calendar day, saved in
the same unit of work as the order it numbers, so a failed placement does not
burn a number.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering


@ordering.aggregate
class OrderNumberSequence:
    day = String(identifier=True, max_length=6)  # YYMMDD
    last_number = Integer(default=0, min_value=0)

    def next_number(self) -> str:
        self.last_number = (self.last_number or 0) + 1
        return format_order_number(self.day, self.last_number)


def day_key(moment: datetime) -> str:
    return moment.strftime("%y%m%d")


def format_order_number(day: str, sequence: int) -> str:
    return f"{day}{sequence:03d}"


def next_order_number(now: datetime | None = None) -> str:
    """Hand out the next order number for the day of ``now`` (default: today, UTC)."""
    day = day_key(now or datetime.now(UTC))
    repo = current_domain.repository_for(OrderNumberSequence)

    try:
        sequence = repo.get(day)
    except ObjectNotFoundError:
        sequence = OrderNumberSequence(day=day, last_number=0)

    number = sequence.next_number()
    repo.add(sequence)
    return number
