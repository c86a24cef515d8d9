"""HTTP client for the flight search and boarding tax endpoints."""

from __future__ import annotations

import json
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Any
from urllib.parse import urlencode, urlunsplit

import httpx

from .model import BoardingTax, Data, Fare, Flight, ModelError, Result

SEARCH_HOST = "api-air-flightsearch-green.smiles.com.ar"
TAX_HOST = "api-airlines-boarding-tax-prd.smiles.com.br"
DATE_FORMAT = "%Y-%m-%d"
MAX_DAYS = 31
MAX_CONCURRENT_REQUESTS = 3
DEFAULT_FARE_TYPE = "SMILES_CLUB"
DEFAULT_REGION = "ARGENTINA"
DEFAULT_ORIGIN = "https://www.smiles.com.ar"
REQUEST_TIMEOUT = 30.0

_BROWSER_HEADERS = {
    "accept": "application/json, text/plain, */*",
    "accept-language": "es-AR,es-419;q=0.9,es;q=0.8,en;q=0.7",
    "channel": "Mobile",
    "language": "es-ES",
    "priority": "u=1, i",
    "sec-ch-ua": '"Chromium";v="146", "Not-A.Brand";v="24", "Google Chrome";v="146"',
    "sec-ch-ua-mobile": "?1",
    "sec-ch-ua-platform": '"Android"',
    "sec-fetch-dest": "empty",
    "sec-fetch-mode": "cors",
    "sec-fetch-site": "same-site",
    "user-agent": (
        "Mozilla/5.0 (Linux; Android 6.0; Nexus 5 Build/MRA58N) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/146.0.0.0 Mobile Safari/537.36"
    ),
}


class SmilesAPIError(Exception):
    """Raised when a request to the API fails or returns an unusable response."""


@dataclass(frozen=True)
class SearchParams:
    """Parameters for a single-date flight search."""

    origin: str
    destination: str
    date: date
    adults: int = 1
    cabin_type: str = "all"
    currency: str = "ARS"


@dataclass(frozen=True)
class RoundTripParams:
    """Parameters for a multi-day cheapest flight search."""

    origin: str
    destination: str
    departure_date: date
    return_date: date | None = None
    days_to_query: int = 1
    fare_type: str = DEFAULT_FARE_TYPE
    one_way: bool = False


@dataclass
class CheapestFlight:
    """The cheapest flight found for one date."""

    flight: Flight
    fare: Fare
    date: date


@dataclass
class CheapestResult:
    """Results of a multi-day cheapest flight search."""

    outbound_per_day: list[CheapestFlight] = field(default_factory=list)
    outbound_cheapest: CheapestFlight | None = None
    return_per_day: list[CheapestFlight] = field(default_factory=list)
    return_cheapest: CheapestFlight | None = None
    outbound_tax: BoardingTax | None = None
    return_tax: BoardingTax | None = None


def _url(host: str, path: str, query: dict[str, str]) -> str:
    return urlunsplit(("https", host, path, urlencode(sorted(query.items())), ""))


def build_search_url(params: SearchParams) -> str:
    """Return the search endpoint URL for the given parameters."""
    return _url(
        SEARCH_HOST,
        "/v1/airlines/search",
        {
            "adults": str(params.adults),
            "cabinType": params.cabin_type,
            "children": "0",
            "currencyCode": params.currency,
            "infants": "0",
            "isFlexibleDateChecked": "false",
            "tripType": "2",
            "forceCongener": "true",
            "r": "ar",
            "departureDate": params.date.strftime(DATE_FORMAT),
            "originAirportCode": params.origin,
            "destinationAirportCode": params.destination,
        },
    )


def build_tax_url(flight_uid: str, fare_uid: str) -> str:
    """Return the boarding tax endpoint URL for a flight and fare."""
    return _url(
        TAX_HOST,
        "/v1/airlines/flight/boardingtax",
        {
            "adults": "1",
            "children": "0",
            "infants": "0",
            "highlightText": "SMILES_CLUB",
            "type": "SEGMENT_1",
            "uid": flight_uid,
            "fareuid": fare_uid,
        },
    )


def get_fare_by_type(flight: Flight, fare_type: str) -> Fare | None:
    """Return the first fare of the given type, or None."""
    return next((fare for fare in flight.fare_list if fare.fare_type == fare_type), None)


def find_cheapest(
    results: list[Result], fare_type: str
) -> tuple[list[CheapestFlight], CheapestFlight | None]:
    """Pick the cheapest flight of each result and the cheapest overall."""
    per_day: list[CheapestFlight] = []
    overall: CheapestFlight | None = None

    for result in results:
        segments = result.data.requested_flight_segment_list
        if not segments:
            continue
        best: CheapestFlight | None = None
        for flight in segments[0].flight_list:
            fare = get_fare_by_type(flight, fare_type)
            if fare is None:
                continue
            if best is None or fare.miles < best.fare.miles:
                best = CheapestFlight(flight=flight, fare=fare, date=result.query_date)
        if best is None:
            continue
        per_day.append(best)
        if overall is None or best.fare.miles < overall.fare.miles:
            overall = best

    return per_day, overall


class SmilesClient:
    """Client for the flight search and boarding tax API."""

    def __init__(self, api_key: str, bearer_token: str = "", http_client: httpx.Client | None = None) -> None:
        self.api_key = api_key
        self.bearer_token = bearer_token
        self.region = DEFAULT_REGION
        self.origin = DEFAULT_ORIGIN
        self._owns_http = http_client is None
        self._http = http_client if http_client is not None else httpx.Client(timeout=REQUEST_TIMEOUT)

    def close(self) -> None:
        """Close the underlying HTTP client if this object created it."""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> SmilesClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _headers(self) -> dict[str, str]:
        headers = dict(_BROWSER_HEADERS)
        headers["origin"] = self.origin
        headers["referer"] = self.origin + "/"
        headers["region"] = self.region
        headers["x-api-key"] = self.api_key
        if self.bearer_token:
            headers["authorization"] = "Bearer " + self.bearer_token
        return headers

    def request_json(self, url: str) -> Any:
        """GET a URL and return its decoded JSON body."""
        try:
            response = self._http.get(url, headers=self._headers())
        except httpx.HTTPError as exc:
            raise SmilesAPIError(f"executing request: {exc}") from exc
        if response.status_code != 200:
            raise SmilesAPIError(f"API returned status {response.status_code} for {url}")
        body = response.content
        if not body:
            raise SmilesAPIError("empty response body")
        try:
            return json.loads(body)
        except ValueError as exc:
            raise SmilesAPIError(f"unmarshalling response: {exc}") from exc

    def search_flights(self, params: SearchParams) -> Data:
        """Search flights on one date."""
        params = replace(
            params,
            adults=params.adults or 1,
            cabin_type=params.cabin_type or "all",
            currency=params.currency or "ARS",
        )
        url = build_search_url(params)
        try:
            return Data.from_dict(self.request_json(url))
        except (SmilesAPIError, ModelError) as exc:
            raise SmilesAPIError(
                f"search flights {params.origin}->{params.destination} on "
                f"{params.date.strftime(DATE_FORMAT)}: {exc}"
            ) from exc

    def get_boarding_tax(self, flight_uid: str, fare_uid: str) -> BoardingTax:
        """Fetch the boarding tax for a flight and fare."""
        url = build_tax_url(flight_uid, fare_uid)
        try:
            return BoardingTax.from_dict(self.request_json(url))
        except (SmilesAPIError, ModelError) as exc:
            raise SmilesAPIError(f"get boarding tax for flight {flight_uid}: {exc}") from exc

    def _search_day(self, origin: str, destination: str, day: date) -> Result:
        data = self.search_flights(SearchParams(origin=origin, destination=destination, date=day))
        return Result(data=data, query_date=day)

    def find_cheapest_flights(self, params: RoundTripParams) -> CheapestResult:
        """Search consecutive days and return the cheapest options found."""
        fare_type = params.fare_type or DEFAULT_FARE_TYPE
        days = min(max(params.days_to_query, 1), MAX_DAYS)
        if not params.one_way and params.return_date is None:
            raise ValueError("return_date is required for a round trip search")

        outbound: list[Future[Result]] = []
        inbound: list[Future[Result]] = []
        with ThreadPoolExecutor(max_workers=MAX_CONCURRENT_REQUESTS) as pool:
            for offset in range(days):
                step = timedelta(days=offset)
                outbound.append(
                    pool.submit(self._search_day, params.origin, params.destination, params.departure_date + step)
                )
                if not params.one_way:
                    assert params.return_date is not None
                    inbound.append(
                        pool.submit(self._search_day, params.destination, params.origin, params.return_date + step)
                    )

        departures = _successful(outbound)
        returns = _successful(inbound)
        if not departures and not returns:
            raise SmilesAPIError("all searches failed, API may be rate-limiting")

        departures.sort(key=lambda r: r.query_date)
        returns.sort(key=lambda r: r.query_date)

        result = CheapestResult()
        result.outbound_per_day, result.outbound_cheapest = find_cheapest(departures, fare_type)
        result.return_per_day, result.return_cheapest = find_cheapest(returns, fare_type)
        return result


def _successful(futures: list[Future[Result]]) -> list[Result]:
    results = []
    for future in futures:
        try:
            results.append(future.result())
        except SmilesAPIError:
            continue
    return results