"""
Payout Dashboard

Per brand contest and calendar month, works out which of the four payout
weeks each eligible store has proof for:

- Week 1: days 1-7, week 2: 8-14, week 3: 15-21, week 4: 22 to month end
- valid:   at least one approved photo for the store tagged with the brand
- pending: no valid photo yet, but the week has not ended (local time)
- missing: the week is over without a valid photo

A store earns the weekly payout for every valid week.
"""

import calendar
import csv
import io
import logging
from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Dict, Optional, Set
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from execution_tracker.errors import NotFoundError
from execution_tracker.models.api_responses import PayoutReport, PayoutRow, WeekStatus
from execution_tracker.repositories import BrandRepository, PhotoRepository, StoreRepository
from execution_tracker.utils.helpers import as_utc, month_week_index, start_of_local_day

logger = logging.getLogger(__name__)

WEEKS_PER_MONTH = 4


def week_end_day(year: int, month: int, week: int) -> date:
    """Last calendar day of a payout week (0-based week index)."""
    if week < WEEKS_PER_MONTH - 1:
        return date(year, month, (week + 1) * 7)
    return date(year, month, calendar.monthrange(year, month)[1])


def parse_month(value: str) -> tuple:
    """
    Parse "YYYY-MM" into (year, month).

    Raises:
        ValueError: If the value is not a valid month
    """
    try:
        year, month = (int(part) for part in value.split("-"))
    except ValueError:
        raise ValueError(f"Invalid month '{value}', expected YYYY-MM")
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month '{value}', expected YYYY-MM")
    return year, month


class PayoutService:
    def __init__(self, db: Session, tz_name: str):
        self.tz_name = tz_name
        self.photos = PhotoRepository(db)
        self.stores = StoreRepository(db)
        self.brands = BrandRepository(db)

    def build_report(
        self,
        brand_name: str,
        year: int,
        month: int,
        today: Optional[date] = None,
    ) -> PayoutReport:
        """
        Build the weekly payout grid for one brand contest and month.

        Args:
            brand_name: Contest name as tagged on approved photos
            year: Calendar year
            month: Calendar month (1-12)
            today: Local date used to tell pending from missing weeks,
                defaults to the current date in the configured timezone

        Raises:
            NotFoundError: If the brand does not exist
        """
        brand = self.brands.get_by_name(brand_name)
        if not brand:
            raise NotFoundError(f"Brand '{brand_name}' not found")

        tz = ZoneInfo(self.tz_name)
        if today is None:
            today = datetime.now(tz).date()

        valid_weeks = self._valid_weeks(brand.name, year, month, tz)

        rows = []
        for store in self.stores.list_eligible_for(brand.name):
            weeks = []
            for week in range(WEEKS_PER_MONTH):
                if week in valid_weeks.get(store.id, set()):
                    weeks.append(WeekStatus.VALID)
                elif today <= week_end_day(year, month, week):
                    weeks.append(WeekStatus.PENDING)
                else:
                    weeks.append(WeekStatus.MISSING)

            earned = weeks.count(WeekStatus.VALID) * brand.payout_amount
            rows.append(
                PayoutRow(
                    store_id=store.id,
                    store_name=store.name,
                    weeks=weeks,
                    earned=earned,
                    max_payout=WEEKS_PER_MONTH * brand.payout_amount,
                )
            )

        total = sum(row.earned for row in rows)
        logger.info(f"Payout report {brand.name} {year}-{month:02d}: {len(rows)} stores, total {total}")

        return PayoutReport(
            brand=brand.name,
            year=year,
            month=month,
            payout_amount=brand.payout_amount,
            rows=rows,
            total_earned=total,
        )

    def _valid_weeks(self, brand_name: str, year: int, month: int, tz: ZoneInfo) -> Dict[str, Set[int]]:
        """Store id -> week indexes with an approved photo tagged with the brand."""
        next_month = date(year + month // 12, month % 12 + 1, 1)
        start = start_of_local_day(date(year, month, 1), self.tz_name).astimezone(timezone.utc)
        end = start_of_local_day(next_month, self.tz_name).astimezone(timezone.utc)

        weeks: Dict[str, Set[int]] = defaultdict(set)
        for photo in self.photos.list_approved_between(start, end):
            if not photo.store_id or brand_name not in (photo.tagged_brands or []):
                continue
            local_day = as_utc(photo.created_at).astimezone(tz).day
            weeks[photo.store_id].add(month_week_index(local_day))
        return weeks


def report_to_csv(report: PayoutReport) -> str:
    """Render a payout report as CSV: store, week_1..week_4, earned, max."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(
        ["store"] + [f"week_{i + 1}" for i in range(WEEKS_PER_MONTH)] + ["earned", "max"]
    )
    for row in report.rows:
        writer.writerow(
            [row.store_name] + [status.value for status in row.weeks] + [row.earned, row.max_payout]
        )
    return buffer.getvalue()
