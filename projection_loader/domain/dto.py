from __future__ import annotations

from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, model_validator

from projection_loader.domain.exceptions import MalformedCodeError


class SourceEntry(BaseModel):
    """One producer/orchard/fruit combination that needs a forecast."""

    producer_orchard_code: str
    fruit_name: str


class ProducerOrchardCode(BaseModel):
    """Typed form of a `PRODUCER-ORCHARDID` code."""

    producer_code: str
    orchard_id: int

    @classmethod
    def parse(cls, raw: str) -> ProducerOrchardCode:
        """
        Split a producer-orchard code on its single `-` separator.

        Args:
            raw (str): Code as delivered by the source query, e.g. `P1-7`

        Raises:
            MalformedCodeError: on zero or several separators, an empty segment
                or an orchard segment that is not made of ASCII digits only
        """
        parts = raw.split("-") if raw else []
        if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
            raise MalformedCodeError(f"Malformed producer-orchard code: {raw!r}")

        orchard = parts[1]
        if not (orchard.isascii() and orchard.isdigit()):
            raise MalformedCodeError(f"Orchard id is not an integer in code: {raw!r}")

        return cls(producer_code=parts[0].strip(), orchard_id=int(orchard))


class ForecastInput(BaseModel):
    """Echo of the request as returned by the prediction service."""

    provider_code: str
    fruit_name: str


class ForecastOutput(BaseModel):
    """Forecast series; index i of the three arrays forms one detail row."""
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    last_date: str = Field(alias="last-date")
    future_dates: List[str] = Field(alias="future-dates")
    human_predictions: List[Optional[float]] = Field(alias="human-predictions")
    model_predictions: List[Optional[float]] = Field(alias="model-predictions")

    @model_validator(mode="after")
    def check_equal_lengths(self) -> ForecastOutput:
        sizes = {len(self.future_dates), len(self.human_predictions), len(self.model_predictions)}
        if len(sizes) != 1:
            raise ValueError(
                "future-dates, human-predictions and model-predictions must have the same length"
            )
        return self


class ForecastResult(BaseModel):
    input: ForecastInput
    output: ForecastOutput


class FailedResponse(BaseModel):
    provider_code: str
    message: str
    error_details: str


class EntrySucceeded(BaseModel):
    """Entry fully forecast and fully persisted."""

    input: ForecastInput


class EntryFailed(FailedResponse):
    """Entry that failed in either the forecast or the persistence phase."""


EntryOutcome = Union[EntrySucceeded, EntryFailed]


class BatchReport(BaseModel):
    """Per-run summary. Each bucket keeps source-list order."""

    success_responses: List[ForecastInput] = Field(default_factory=list)
    failed_responses: List[FailedResponse] = Field(default_factory=list)

    @classmethod
    def from_outcomes(cls, outcomes: List[EntryOutcome]) -> BatchReport:
        report = cls()
        for outcome in outcomes:
            if isinstance(outcome, EntrySucceeded):
                report.success_responses.append(outcome.input)
            else:
                report.failed_responses.append(FailedResponse(**outcome.model_dump()))
        return report

    @property
    def total(self) -> int:
        return len(self.success_responses) + len(self.failed_responses)
