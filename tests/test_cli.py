import io
from datetime import date, datetime, timezone

import httpx
import pytest

from smilesflights.cli import UsageError, format_flight, main, parse_args, print_results, search_destination
from smilesflights.client import CheapestFlight, RoundTripParams, SmilesClient
from smilesflights.model import Airline, Airport, Fare, Flight, FlightDetail


def _cheapest(day, miles, amount=315.76):
    flight = Flight(
        cabin="ECONOMIC",
        stops=1,
        departure=FlightDetail(date=datetime(2023, 2, day, 7, 45, tzinfo=timezone.utc), airport=Airport(code="EZE")),
        arrival=FlightDetail(date=datetime(2023, 2, day, 17, 0, tzinfo=timezone.utc), airport=Airport(code="PUJ")),
        airline=Airline(code="AV", name="Avianca"),
    )
    fare = Fare(fare_type="SMILES_CLUB", miles=miles, airline_fare_amount=amount)
    return CheapestFlight(flight=flight, fare=fare, date=date(2023, 2, day))


def _client(handler):
    return SmilesClient("placeholder", http_client=httpx.Client(transport=httpx.MockTransport(handler)))


def _search_handler(request):
    origin = request.url.params["originAirportCode"]
    destination = request.url.params["destinationAirportCode"]
    day = request.url.params["departureDate"]
    if origin != "EZE":
        return httpx.Response(200, json={"requestedFlightSegmentList": [{"flightList": []}]})
    miles = 50000 if day.endswith("01") else 40000
    flight = {
        "uid": day,
        "cabin": "ECONOMIC",
        "departure": {"date": f"{day}T08:00:00", "airport": {"code": origin}},
        "arrival": {"date": f"{day}T18:00:00", "airport": {"code": destination}},
        "airline": {"name": "Avianca"},
        "fareList": [{"type": "SMILES_CLUB", "miles": miles, "airlineFareAmount": "120.50"}],
    }
    return httpx.Response(200, json={"requestedFlightSegmentList": [{"flightList": [flight]}]})


def test_parse_args_one_way():
    params = parse_args(["2026-06-01", "30"], True)
    assert params.one_way is True
    assert params.departure_date == date(2026, 6, 1)
    assert params.days_to_query == 30
    assert params.return_date is None


def test_parse_args_round_trip():
    params = parse_args(["2026-06-01", "2026-06-20", "10"], False)
    assert params.one_way is False
    assert params.return_date == date(2026, 6, 20)
    assert params.days_to_query == 10


@pytest.mark.parametrize("days", ["0", "32", "-1"])
def test_parse_args_days_out_of_range(days):
    with pytest.raises(UsageError, match="la cantidad de días debe ser entre 1 y 31"):
        parse_args(["2026-06-01", days], True)


def test_parse_args_return_before_departure():
    with pytest.raises(UsageError, match="la fecha de regreso debe ser posterior a la de salida"):
        parse_args(["2026-06-20", "2026-06-01", "5"], False)


@pytest.mark.parametrize("bad", ["2026-13-01", "2026/06/01", "2026-6-1"])
def test_parse_args_invalid_departure(bad):
    with pytest.raises(UsageError) as info:
        parse_args([bad, "5"], True)
    assert str(info.value).startswith(f"la fecha de salida {bad} no es válida")


def test_parse_args_invalid_days():
    with pytest.raises(UsageError) as info:
        parse_args(["2026-06-01", "2026-06-02", "abc"], False)
    assert str(info.value).startswith("la cantidad de días abc no es válida")


def test_format_flight():
    assert format_flight(_cheapest(8, 82000)) == (
        "EZE-PUJ, ECONOMIC, Avianca, 1 escalas, 82000 millas, USD 315.76 tasas"
    )


def test_print_results_layout():
    first, second = _cheapest(8, 30000), _cheapest(9, 25000)
    out = io.StringIO()
    print_results([first, second], second, "  ", out)
    lines = out.getvalue().split("\n")
    assert lines[0] == "  2023-02-08: " + format_flight(first)
    assert lines[1] == "  2023-02-09: " + format_flight(second)
    assert lines[2] == ""
    assert lines[3] == "  ★ Más barato: 2023-02-09, " + format_flight(second)
    assert lines[4:] == ["", ""]


def test_print_results_without_cheapest():
    out = io.StringIO()
    print_results([_cheapest(8, 30000)], None, "", out)
    assert "★" not in out.getvalue()
    assert out.getvalue().count("\n") == 3


def test_search_destination_one_way():
    out, err = io.StringIO(), io.StringIO()
    base = RoundTripParams(origin="", destination="", departure_date=date(2026, 6, 1), days_to_query=2, one_way=True)
    search_destination(_client(_search_handler), "EZE", "PUJ", base, True, out, err)
    text = out.getvalue()
    assert text.startswith("Buscando ida EZE → PUJ (2026-06-01, 2 días)")
    assert "  VUELOS DE IDA" in text
    cheapest_lines = [line for line in text.splitlines() if "★ Más barato: " in line]
    assert len(cheapest_lines) == 1
    assert "40000 millas" in cheapest_lines[0]
    assert "USD 120.50 tasas" in cheapest_lines[0]
    assert "VUELTA" not in text
    assert err.getvalue() == ""


def test_search_destination_round_trip_without_returns():
    out = io.StringIO()
    base = RoundTripParams(
        origin="", destination="", departure_date=date(2026, 6, 1), return_date=date(2026, 6, 20)
    )
    search_destination(_client(_search_handler), "EZE", "PUJ", base, False, out, io.StringIO())
    text = out.getvalue()
    assert "vuelta 2026-06-20" in text
    assert "  No se encontraron vuelos de vuelta" in text


def test_search_destination_reports_error():
    out, err = io.StringIO(), io.StringIO()
    base = RoundTripParams(origin="", destination="", departure_date=date(2026, 6, 1), one_way=True)
    search_destination(_client(lambda request: httpx.Response(500)), "EZE", "PUJ", base, True, out, err)
    assert err.getvalue().startswith("  Error: ")
    assert "all searches failed" in err.getvalue()
    assert "VUELOS" not in out.getvalue()


def test_main_usage(capsys):
    assert main(["EZE", "MAD"]) == 1
    assert capsys.readouterr().out.startswith("Forma de Uso:")


def test_main_requires_api_key(monkeypatch, capsys):
    monkeypatch.delenv("SMILES_API_KEY", raising=False)
    assert main(["EZE", "MAD", "2026-06-01", "5"]) == 1
    assert "SMILES_API_KEY" in capsys.readouterr().err


def test_main_invalid_origin(monkeypatch, capsys):
    monkeypatch.setenv("SMILES_API_KEY", "placeholder")
    assert main(["EZEE", "MAD", "2026-06-01", "5"]) == 1
    assert "EZEE" in capsys.readouterr().err


def test_main_invalid_destination(monkeypatch, capsys):
    monkeypatch.setenv("SMILES_API_KEY", "placeholder")
    assert main(["EZE", "MAD,BC", "2026-06-01", "5"]) == 1
    assert "destino BC" in capsys.readouterr().err


def test_main_invalid_days(monkeypatch, capsys):
    monkeypatch.setenv("SMILES_API_KEY", "placeholder")
    assert main(["EZE", "MAD", "2026-06-01", "2026-06-10", "40"]) == 1
    assert "la cantidad de días debe ser entre 1 y 31" in capsys.readouterr().err