"""Command line search for the cheapest flights to one or more destinations."""

from __future__ import annotations

import os
import re
import sys
import time
from dataclasses import replace
from datetime import date, datetime
from typing import Sequence, TextIO

from .client import DATE_FORMAT, MAX_DAYS, CheapestFlight, RoundTripParams, SmilesAPIError, SmilesClient
from .model import Flight

USAGE = "\n".join(
    [
        "Forma de Uso:",
        "  Solo ida:    smiles EZE MAD,BCN,FCO 2026-06-01 30",
        "  Ida y vuelta: smiles EZE MAD,BCN 2026-06-01 2026-06-20 10",
        "",
        "  Destinos separados por coma, hasta 31 días de búsqueda",
    ]
)

_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
_INT_PATTERN = re.compile(r"[+-]?\d+")


class UsageError(Exception):
    """Raised when the command line arguments are invalid."""


def _parse_date(text: str, label: str) -> date:
    if not _DATE_PATTERN.fullmatch(text):
        raise UsageError(f"{label} {text} no es válida: se esperaba AAAA-MM-DD")
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError as exc:
        raise UsageError(f"{label} {text} no es válida: {exc}") from exc


def _parse_days(text: str) -> int:
    if not _INT_PATTERN.fullmatch(text):
        raise UsageError(f'la cantidad de días {text} no es válida: "{text}" no es un número entero')
    days = int(text)
    if not 1 <= days <= MAX_DAYS:
        raise UsageError("la cantidad de días debe ser entre 1 y 31")
    return days


def parse_args(args: Sequence[str], one_way: bool) -> RoundTripParams:
    """Parse the dates and day count that follow the airports."""
    args = list(args)
    expected = 2 if one_way else 3
    if len(args) != expected:
        raise UsageError(f"se esperaban {expected} argumentos")

    departure = _parse_date(args[0], "la fecha de salida")
    if one_way:
        days = _parse_days(args[1])
        return RoundTripParams(origin="", destination="", departure_date=departure, days_to_query=days, one_way=True)

    return_day = _parse_date(args[1], "la fecha de regreso")
    if return_day < departure:
        raise UsageError("la fecha de regreso debe ser posterior a la de salida")
    days = _parse_days(args[2])
    return RoundTripParams(
        origin="",
        destination="",
        departure_date=departure,
        return_date=return_day,
        days_to_query=days,
    )


def _flight_date(flight: Flight) -> str:
    departure = flight.departure.date
    return departure.strftime(DATE_FORMAT) if departure is not None else "0001-01-01"


def format_flight(cheapest_flight: CheapestFlight) -> str:
    """Describe a flight's route, cabin, airline, stops, miles and taxes."""
    flight = cheapest_flight.flight
    fare = cheapest_flight.fare
    return (
        f"{flight.departure.airport.code}-{flight.arrival.airport.code}, {flight.cabin}, "
        f"{flight.airline.name}, {flight.stops} escalas, {fare.miles} millas, "
        f"USD {fare.airline_fare_amount:.2f} tasas"
    )


def print_results(
    per_day: Sequence[CheapestFlight],
    cheapest: CheapestFlight | None,
    indent: str = "",
    out: TextIO | None = None,
) -> None:
    """Print one line per day followed by the overall cheapest flight."""
    out = sys.stdout if out is None else out
    for cf in per_day:
        print(f"{indent}{_flight_date(cf.flight)}: {format_flight(cf)}", file=out)
    print(file=out)
    if cheapest is not None:
        print(f"{indent}★ Más barato: {_flight_date(cheapest.flight)}, {format_flight(cheapest)}", file=out)
    print(file=out)


def _format_elapsed(seconds: float) -> str:
    total = int(seconds + 0.5)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


def search_destination(
    client: SmilesClient,
    origin: str,
    destination: str,
    base: RoundTripParams,
    one_way: bool,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> None:
    """Search one destination and print its outbound and return results."""
    out = sys.stdout if out is None else out
    err = sys.stderr if err is None else err
    params = replace(base, origin=origin, destination=destination)
    departure = params.departure_date.strftime(DATE_FORMAT)

    if one_way:
        print(f"Buscando ida {origin} → {destination} ({departure}, {params.days_to_query} días)", file=out)
    else:
        return_day = params.return_date.strftime(DATE_FORMAT) if params.return_date else ""
        print(
            f"Buscando {origin} → {destination} (ida {departure}, vuelta {return_day}, "
            f"{params.days_to_query} días)",
            file=out,
        )

    start = time.monotonic()
    try:
        result = client.find_cheapest_flights(params)
    except SmilesAPIError as exc:
        print(f"  Error: {exc}\n", file=err)
        return
    elapsed = _format_elapsed(time.monotonic() - start)

    print(f"  Consultas: {elapsed}\n", file=out)

    if result.outbound_per_day:
        print("  VUELOS DE IDA", file=out)
        print_results(result.outbound_per_day, result.outbound_cheapest, "  ", out)
    else:
        print("  No se encontraron vuelos de ida", file=out)

    if not one_way:
        if result.return_per_day:
            print("  VUELOS DE VUELTA", file=out)
            print_results(result.return_per_day, result.return_cheapest, "  ", out)
        else:
            print("  No se encontraron vuelos de vuelta", file=out)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line search; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not 4 <= len(args) <= 5:
        print(USAGE)
        return 1

    api_key = os.environ.get("SMILES_API_KEY", "")
    if not api_key:
        print("Error: la variable de entorno SMILES_API_KEY es requerida", file=sys.stderr)
        return 1
    bearer_token = os.environ.get("SMILES_BEARER_TOKEN", "")

    origin = args[0]
    if len(origin.encode()) != 3:
        print(f"Error: el aeropuerto de origen {origin} no es válido (debe ser 3 letras)", file=sys.stderr)
        return 1

    destinations = args[1].split(",")
    for destination in destinations:
        if len(destination.encode()) != 3:
            print(
                f"Error: el aeropuerto de destino {destination} no es válido (debe ser 3 letras)",
                file=sys.stderr,
            )
            return 1

    one_way = len(args) == 4
    try:
        params = parse_args(args[2:], one_way)
    except UsageError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    with SmilesClient(api_key, bearer_token) as client:
        for index, destination in enumerate(destinations):
            if index:
                print("═" * 60)
            search_destination(client, origin, destination.upper(), params, one_way)
    return 0