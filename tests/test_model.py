import json
from datetime import datetime, timezone

import pytest

from smilesflights.model import (
    BoardingTax,
    Data,
    Fare,
    Flight,
    FlightDetail,
    ModelError,
    parse_flex_float,
    parse_flight_datetime,
)


def test_flight_detail_valid():
    doc = json.loads(
        '{"date":"2023-02-08T07:45:00","airport":{"code":"EZE","name":"Ministro Pistarini",'
        '"city":"Buenos Aires","country":"Argentina"}}'
    )
    detail = FlightDetail.from_dict(doc)
    assert detail.date == datetime(2023, 2, 8, 7, 45, 0, tzinfo=timezone.utc)
    assert detail.airport.code == "EZE"
    assert detail.airport.city == "Buenos Aires"


def test_flight_detail_invalid_date_format():
    with pytest.raises(ModelError):
        FlightDetail.from_dict({"date": "2023/02/08", "airport": {"code": "EZE"}})


def test_flight_detail_invalid_document():
    with pytest.raises(ModelError):
        FlightDetail.from_dict("{invalid}")


def test_flight_detail_missing_date_is_error():
    with pytest.raises(ModelError):
        FlightDetail.from_dict({"airport": {"code": "EZE"}})


def test_fare_from_dict():
    doc = json.loads(
        """{
        "uid": "abc123",
        "type": "SMILES_CLUB",
        "miles": 82000,
        "baseMiles": 90000,
        "money": 0,
        "airlineFareAmount": 315.76,
        "airlineTax": 116.30,
        "fareValue": 0.00630,
        "legListCost": "EZE-BOG = 233.04 / BOG-PUJ = 82.72",
        "legListCurrency": "USD",
        "offer": 1
    }"""
    )
    fare = Fare.from_dict(doc)
    assert fare.uid == "abc123"
    assert fare.fare_type == "SMILES_CLUB"
    assert fare.miles == 82000
    assert fare.base_miles == 90000
    assert fare.airline_fare_amount == 315.76
    assert fare.airline_tax == 116.30
    assert fare.leg_list_cost == "EZE-BOG = 233.04 / BOG-PUJ = 82.72"
    assert fare.offer == 1


def test_fare_accepts_numbers_as_strings():
    fare = Fare.from_dict({"airlineFareAmount": "315.76", "airlineTax": ""})
    assert fare.airline_fare_amount == 315.76
    assert fare.airline_tax == 0.0


def test_fare_rejects_bad_number_string():
    with pytest.raises(ModelError):
        Fare.from_dict({"airlineTax": "abc"})


def test_fare_rejects_string_miles():
    with pytest.raises(ModelError):
        Fare.from_dict({"miles": "82000"})


def test_flight_from_dict_with_new_fields():
    doc = json.loads(
        """{
        "uid": "flight1",
        "cabin": "BUSINESS",
        "stops": 1,
        "availableSeats": 3,
        "duration": {"hours": 10, "minutes": 15},
        "durationNumber": 1015,
        "sourceFare": "AWARD",
        "airportMainStop": {"code": "BOG", "name": "El Dorado", "city": "Bogota", "country": "Colombia"},
        "timeStop": {"hours": 1, "minutes": 15},
        "hourMainStop": "12:00-13:15",
        "departure": {"date": "2023-02-08T07:45:00", "airport": {"code": "EZE"}},
        "arrival": {"date": "2023-02-08T17:00:00", "airport": {"code": "PUJ"}},
        "airline": {"code": "AV", "name": "Avianca"},
        "fareList": [
            {"uid": "f1", "type": "SMILES_CLUB", "miles": 82000}
        ]
    }"""
    )
    flight = Flight.from_dict(doc)
    assert flight.available_seats == 3
    assert (flight.duration.hours, flight.duration.minutes) == (10, 15)
    assert flight.airport_main_stop.code == "BOG"
    assert (flight.time_stop.hours, flight.time_stop.minutes) == (1, 15)
    assert flight.hour_main_stop == "12:00-13:15"
    assert len(flight.fare_list) == 1
    assert flight.fare_list[0].miles == 82000
    assert flight.airline.name == "Avianca"
    assert flight.arrival.airport.code == "PUJ"


def test_flight_round_trip():
    doc = {
        "uid": "flight1",
        "cabin": "ECONOMIC",
        "stops": 0,
        "departure": {"date": "2023-02-08T07:45:00", "airport": {"code": "EZE"}},
        "arrival": {"date": "2023-02-08T17:00:00", "airport": {"code": "PUJ"}},
        "fareList": [{"uid": "f1", "type": "SMILES", "miles": 90000}],
    }
    flight = Flight.from_dict(doc)
    again = Flight.from_dict(flight.to_dict())
    assert again == flight
    assert flight.to_dict()["departure"]["date"] == "2023-02-08T07:45:00"


def test_flight_without_departure_has_no_date():
    flight = Flight.from_dict({"uid": "x"})
    assert flight.departure.date is None
    assert flight.fare_list == []


def test_data_round_trip():
    doc = {
        "requestedFlightSegmentList": [
            {
                "type": "SEGMENT_1",
                "flightList": [{"uid": "a", "fareList": [{"type": "SMILES_CLUB", "miles": 1000}]}],
                "bestPricing": {"miles": 1000, "sourceFare": "AWARD"},
                "airports": {"departureAirportList": [{"code": "EZE"}], "arrivalAirportList": [{"code": "PUJ"}]},
            }
        ]
    }
    data = Data.from_dict(doc)
    assert data.requested_flight_segment_list[0].airports.arrival_airports[0].code == "PUJ"
    assert Data.from_dict(data.to_dict()) == data


def test_data_rejects_non_object():
    with pytest.raises(ModelError):
        Data.from_dict([1, 2, 3])


def test_boarding_tax_from_dict():
    tax = BoardingTax.from_dict({"totals": {"total": {"miles": 82000, "money": 120.5}, "totalFare": {"miles": 80000}}})
    assert tax.totals.total.miles == 82000
    assert tax.totals.total.money == 120.5
    assert tax.totals.total_fare.miles == 80000
    assert tax.to_dict()["totals"]["totalFare"]["money"] == 0.0


@pytest.mark.parametrize(
    "value, expected",
    [(12, 12.0), (1.5, 1.5), ("2.25", 2.25), ("", 0.0), (None, 0.0)],
)
def test_parse_flex_float(value, expected):
    assert parse_flex_float(value) == expected


@pytest.mark.parametrize("value", ["x", True, [1], " 1"])
def test_parse_flex_float_errors(value):
    with pytest.raises(ModelError):
        parse_flex_float(value)


def test_parse_flight_datetime_rejects_short_fields():
    with pytest.raises(ModelError):
        parse_flight_datetime("2023-2-8T07:45:00")