"""Data model for the flight search and boarding tax API documents."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Mapping

_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"
_DATETIME_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")


class ModelError(ValueError):
    """Raised when a document does not have the expected shape."""


def parse_flex_float(value: Any) -> float:
    """Read a number that the API sends either as a number or as a string."""
    if value is None or value == "":
        return 0.0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if not isinstance(value, str):
        raise ModelError(f"expected a number or a string, got {value!r}")
    if value != value.strip() or "_" in value:
        raise ModelError(f"invalid number {value!r}")
    try:
        return float(value)
    except ValueError as exc:
        raise ModelError(f"invalid number {value!r}") from exc


def parse_flight_datetime(text: Any) -> datetime:
    """Parse a timestamp of the form 2006-01-02T15:04:05 as UTC."""
    if not isinstance(text, str) or not _DATETIME_PATTERN.fullmatch(text):
        raise ModelError(f"invalid flight date {text!r}, expected YYYY-MM-DDTHH:MM:SS")
    try:
        parsed = datetime.strptime(text, _DATETIME_FORMAT)
    except ValueError as exc:
        raise ModelError(f"invalid flight date {text!r}: {exc}") from exc
    return parsed.replace(tzinfo=timezone.utc)


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ModelError(f"{what}: expected an object, got {type(data).__name__}")
    return data


def _typed(kind: type | tuple[type, ...], empty: Any, name: str) -> Callable[[Mapping[str, Any], str], Any]:
    def parse(d: Mapping[str, Any], key: str) -> Any:
        value = d.get(key)
        if value is None:
            return empty
        if isinstance(value, bool) or not isinstance(value, kind):
            raise ModelError(f"{key}: expected {name}, got {value!r}")
        return type(empty)(value)

    return parse


_str = _typed(str, "", "a string")
_int = _typed(int, 0, "an integer")
_float = _typed((int, float), 0.0, "a number")


def _flex(d: Mapping[str, Any], key: str) -> float:
    return parse_flex_float(d.get(key))


def _date(d: Mapping[str, Any], key: str) -> datetime:
    return parse_flight_datetime(_str(d, key))


def _nested(cls: Any) -> Callable[[Mapping[str, Any], str], Any]:
    return lambda d, key: cls.from_dict(d.get(key))


def _list_of(cls: Any) -> Callable[[Mapping[str, Any], str], list[Any]]:
    def parse(d: Mapping[str, Any], key: str) -> list[Any]:
        value = d.get(key)
        if value is None:
            return []
        if not isinstance(value, list):
            raise ModelError(f"{key}: expected a list, got {type(value).__name__}")
        return [cls.from_dict(item) for item in value]

    return parse


def _detail(d: Mapping[str, Any], key: str) -> FlightDetail:
    return FlightDetail.from_dict(d[key]) if key in d else FlightDetail()


def _f(key: str, parse: Callable[[Mapping[str, Any], str], Any], **kwargs: Any) -> Any:
    return field(metadata={"key": key, "parse": parse}, **kwargs)


def _dump(value: Any) -> Any:
    if is_dataclass(value) and hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, list):
        return [_dump(item) for item in value]
    if isinstance(value, datetime):
        return value.strftime(_DATETIME_FORMAT)
    return value


def _load(cls: Any, data: Any) -> Any:
    d = _mapping(data, cls.__name__)
    return cls(**{f.name: f.metadata["parse"](d, f.metadata["key"]) for f in fields(cls)})


def _to_dict(record: Any) -> dict[str, Any]:
    return {f.metadata["key"]: _dump(getattr(record, f.name)) for f in fields(record)}


@dataclass
class Airport:
    code: str = _f("code", _str, default="")
    name: str = _f("name", _str, default="")
    city: str = _f("city", _str, default="")
    country: str = _f("country", _str, default="")

    @classmethod
    def from_dict(cls, data: Any) -> Airport:
        return _load(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)


@dataclass
class Airline:
    code: str = _f("code", _str, default="")
    name: str = _f("name", _str, default="")

    @classmethod
    def from_dict(cls, data: Any) -> Airline:
        return _load(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)


@dataclass
class FlightDetail:
    date: datetime | None = _f("date", _date, default=None)
    airport: Airport = _f("airport", _nested(Airport), default_factory=Airport)

    @classmethod
    def from_dict(cls, data: Any) -> FlightDetail:
        return _load(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)


@dataclass
class Duration:
    hours: int = _f("hours", _int, default=0)
    minutes: int = _f("minutes", _int, default=0)

    @classmethod
    def from_dict(cls, data: Any) -> Duration:
        return _load(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)


@dataclass
class Leg:
    cabin: str = _f("cabin", _str, default="")
    departure: FlightDetail = _f("departure", _detail, default_factory=FlightDetail)
    arrival: FlightDetail = _f("arrival", _detail, default_factory=FlightDetail)

    @classmethod
    def from_dict(cls, data: Any) -> Leg:
        return _load(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)


@dataclass
class Fare:
    uid: str = _f("uid", _str, default="")
    fare_type: str = _f("type", _str, default="")
    miles: int = _f("miles", _int, default=0)
    base_miles: int = _f("baseMiles", _int, default=0)
    money: float = _f("money", _float, default=0.0)
    airline_fare_amount: float = _f("airlineFareAmount", _flex, default=0.0)
    airline_tax: float = _f("airlineTax", _flex, default=0.0)
    fare_value: float = _f("fareValue", _float, default=0.0)
    leg_list_cost: str = _f("legListCost", _str, default="")
    leg_list_currency: str = _f("legListCurrency", _str, default="")
    offer: int = _f("offer", _int, default=0)

    @classmethod
    def from_dict(cls, data: Any) -> Fare:
        return _load(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)


@dataclass
class Flight:
    uid: str = _f("uid", _str, default="")
    cabin: str = _f("cabin", _str, default="")
    stops: int = _f("stops", _int, default=0)
    available_seats: int = _f("availableSeats", _int, default=0)
    duration: Duration = _f("duration", _nested(Duration), default_factory=Duration)
    duration_number: int = _f("durationNumber", _int, default=0)
    source_fare: str = _f("sourceFare", _str, default="")
    airport_main_stop: Airport = _f("airportMainStop", _nested(Airport), default_factory=Airport)
    time_stop: Duration = _f("timeStop", _nested(Duration), default_factory=Duration)
    hour_main_stop: str = _f("hourMainStop", _str, default="")
    departure: FlightDetail = _f("departure", _detail, default_factory=FlightDetail)
    arrival: FlightDetail = _f("arrival", _detail, default_factory=FlightDetail)
    airline: Airline = _f("airline", _nested(Airline), default_factory=Airline)
    leg_list: list[Leg] = _f("legList", _list_of(Leg), default_factory=list)
    fare_list: list[Fare] = _f("fareList", _list_of(Fare), default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> Flight:
        return _load(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)


@dataclass
class BestPricing:
    miles: int = _f("miles", _int, default=0)
    source_fare: str = _f("sourceFare", _str, default="")
    fare: Fare = _f("fare", _nested(Fare), default_factory=Fare)

    @classmethod
    def from_dict(cls, data: Any) -> BestPricing:
        return _load(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)


@dataclass
class Airports:
    departure_airports: list[Airport] = _f("departureAirportList", _list_of(Airport), default_factory=list)
    arrival_airports: list[Airport] = _f("arrivalAirportList", _list_of(Airport), default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> Airports:
        return _load(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)


@dataclass
class Segment:
    segment_type: str = _f("type", _str, default="")
    flight_list: list[Flight] = _f("flightList", _list_of(Flight), default_factory=list)
    best_pricing: BestPricing = _f("bestPricing", _nested(BestPricing), default_factory=BestPricing)
    airports: Airports = _f("airports", _nested(Airports), default_factory=Airports)

    @classmethod
    def from_dict(cls, data: Any) -> Segment:
        return _load(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)


@dataclass
class Data:
    requested_flight_segment_list: list[Segment] = _f(
        "requestedFlightSegmentList", _list_of(Segment), default_factory=list
    )

    @classmethod
    def from_dict(cls, data: Any) -> Data:
        return _load(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)


@dataclass
class Result:
    """A search response together with the date it was queried for."""

    data: Data
    query_date: date


@dataclass
class Total:
    miles: int = _f("miles", _int, default=0)
    money: float = _f("money", _float, default=0.0)

    @classmethod
    def from_dict(cls, data: Any) -> Total:
        return _load(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)


@dataclass
class Totals:
    total: Total = _f("total", _nested(Total), default_factory=Total)
    total_fare: Total = _f("totalFare", _nested(Total), default_factory=Total)

    @classmethod
    def from_dict(cls, data: Any) -> Totals:
        return _load(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)


@dataclass
class BoardingTax:
    totals: Totals = _f("totals", _nested(Totals), default_factory=Totals)

    @classmethod
    def from_dict(cls, data: Any) -> BoardingTax:
        return _load(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)