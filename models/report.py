# models/report.py

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, field_validator, model_validator

from .enums import ReportType
from .validators import required_text


class ReportCreate(BaseModel):
    """
    Report request. Without dates the period comes from `type`
    (current month, current quarter, current year); "custom"
    needs both dates.
    """
    title: str
    type: ReportType = ReportType.monthly
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    condominium_ids: List[str] = []
    store_pdf: bool = False

    @field_validator("title", mode="before")
    def title_required(cls, v):
        return required_text(v, "title")

    @model_validator(mode="after")
    def check_period(self):
        if self.type == ReportType.custom and (not self.start_date or not self.end_date):
            raise ValueError("Custom reports require start_date and end_date")
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must be before or equal to end_date")
        return self
