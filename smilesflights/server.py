"""Tool server exposing flight searches over line-delimited JSON-RPC on stdio."""

from __future__ import annotations

import functools
import json
import os
import re
import sys
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Mapping, TextIO

from .client import (
    DATE_FORMAT,
    DEFAULT_FARE_TYPE,
    CheapestFlight,
    RoundTripParams,
    SearchParams,
    SmilesAPIError,
    SmilesClient,
)

SERVER_NAME = "smiles-mcp"
SERVER_VERSION = "1.0.0"
LATEST_PROTOCOL_VERSION = "2025-03-26"
SUPPORTED_PROTOCOL_VERSIONS = ("2025-03-26", "2024-11-05")

PARSE_ERROR, INVALID_REQUEST, METHOD_NOT_FOUND, INVALID_PARAMS, INTERNAL_ERROR = (
    -32700, -32600, -32601, -32602, -32603,
)

_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
_INT_PATTERN = re.compile(r"[+-]?\d+(?:\.0*)?")

# name, description, properties as (name, type, description, required)
_TOOLS = (
    (
        "search_flights",
        "Search for Smiles miles flights between two airports on a specific date. Returns all "
        "available flights with pricing in miles (SMILES, SMILES_CLUB, SMILES_MONEY fare types), "
        "airline, stops, duration, and available seats.",
        (
            ("origin", "string", "Origin airport IATA code (e.g. EZE, GRU, GIG)", True),
            ("destination", "string", "Destination airport IATA code (e.g. PUJ, MIA, SCL)", True),
            ("departure_date", "string", "Departure date in YYYY-MM-DD format", True),
            ("cabin", "string", "Cabin type filter: all, ECONOMIC, BUSINESS. Default: all", False),
            ("adults", "number", "Number of adult passengers. Default: 1", False),
        ),
    ),
    (
        "find_cheapest_flights",
        "Find the cheapest roundtrip flights in miles across a date range. Searches multiple "
        "consecutive days concurrently and returns the cheapest option per day plus the overall "
        "cheapest for both outbound and return legs.",
        (
            ("origin", "string", "Origin airport IATA code (e.g. EZE, GRU)", True),
            ("destination", "string", "Destination airport IATA code (e.g. PUJ, MIA)", True),
            ("departure_date", "string", "First departure date to search (YYYY-MM-DD)", True),
            ("return_date", "string", "First return date to search (YYYY-MM-DD)", True),
            ("days", "number",
             "Number of consecutive days to search from each start date. Default: 1, Max: 10", False),
            ("fare_type", "string",
             "Fare type to compare: SMILES, SMILES_CLUB, SMILES_MONEY, SMILES_MONEY_CLUB. "
             "Default: SMILES_CLUB", False),
        ),
    ),
    (
        "get_flight_taxes",
        "Get boarding taxes and fees for a specific flight and fare combination. Use flight_uid "
        "and fare_uid from search_flights results.",
        (
            ("flight_uid", "string", "Flight UID from search_flights results", True),
            ("fare_uid", "string", "Fare UID from search_flights results", True),
        ),
    ),
)


class _ToolFailure(Exception):
    """A tool call that ends with an error result."""


def _string_arg(arguments: Mapping[str, Any], key: str, default: str) -> str:
    value = arguments.get(key, default)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value) if isinstance(value, (str, int, float)) else ""


def _int_arg(arguments: Mapping[str, Any], key: str, default: int) -> int:
    value = arguments.get(key, default)
    if isinstance(value, (bool, int, float)):
        return int(value)
    if isinstance(value, str) and _INT_PATTERN.fullmatch(value):
        return int(value.split(".", 1)[0])
    return 0


def _required(arguments: Mapping[str, Any], *keys: str) -> list[str]:
    values = [_string_arg(arguments, key, "") for key in keys]
    for key, value in zip(keys, values):
        if not value:
            raise _ToolFailure(f"{key} is required")
    return values


def _parse_date(text: str, message: str) -> date:
    if _DATE_PATTERN.fullmatch(text):
        try:
            return datetime.strptime(text, DATE_FORMAT).date()
        except ValueError:
            pass
    raise _ToolFailure(message.format(json.dumps(text, ensure_ascii=False)))


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _summary(cheapest: CheapestFlight | None) -> dict[str, Any] | None:
    if cheapest is None:
        return None
    flight = cheapest.flight
    departure = flight.departure.date
    return {
        "date": departure.strftime(DATE_FORMAT) if departure is not None else "0001-01-01",
        "origin": flight.departure.airport.code,
        "destination": flight.arrival.airport.code,
        "airline": flight.airline.name,
        "cabin": flight.cabin,
        "stops": flight.stops,
        "miles": cheapest.fare.miles,
        "fare_type": cheapest.fare.fare_type,
    }


def _error(msg_id: Any, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": msg_id, "error": {"code": code, "message": message}}


def _response(msg_id: Any, result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": msg_id, "result": result}


@dataclass
class ToolResult:
    """The text outcome of a tool call, flagged when it reports an error."""

    text: str
    is_error: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"content": [{"type": "text", "text": self.text}], "isError": self.is_error}


def _tool(method: Callable[..., str]) -> Callable[..., ToolResult]:
    @functools.wraps(method)
    def wrapper(self: SmilesServer, arguments: Mapping[str, Any]) -> ToolResult:
        try:
            return ToolResult(method(self, arguments))
        except _ToolFailure as exc:
            return ToolResult(str(exc), is_error=True)

    return wrapper


class SmilesServer:
    """Serves the flight search tools to a JSON-RPC client."""

    def __init__(self, client: SmilesClient) -> None:
        self.client = client

    def list_tools(self) -> list[dict[str, Any]]:
        """Return the definitions of the available tools."""
        return [
            {
                "name": name,
                "description": description,
                "inputSchema": {
                    "type": "object",
                    "properties": {p: {"type": t, "description": d} for p, t, d, _ in props},
                    "required": [p for p, _, _, required in props if required],
                },
            }
            for name, description, props in _TOOLS
        ]

    def call_tool(self, name: str, arguments: Any) -> ToolResult:
        """Run the named tool; raise KeyError if there is no such tool."""
        if name not in {tool[0] for tool in _TOOLS}:
            raise KeyError(f"tool '{name}' not found")
        handler = getattr(self, name)
        return handler(arguments if isinstance(arguments, Mapping) else {})

    @_tool
    def search_flights(self, arguments: Mapping[str, Any]) -> str:
        """List all flights between two airports on one date."""
        origin, destination, date_text = _required(arguments, "origin", "destination", "departure_date")
        day = _parse_date(date_text, "invalid date format {}, expected YYYY-MM-DD")
        params = SearchParams(
            origin=origin,
            destination=destination,
            date=day,
            adults=_int_arg(arguments, "adults", 1),
            cabin_type=_string_arg(arguments, "cabin", "all"),
        )
        try:
            return _to_json(self.client.search_flights(params).to_dict())
        except SmilesAPIError as exc:
            raise _ToolFailure(f"search failed: {exc}") from exc

    @_tool
    def find_cheapest_flights(self, arguments: Mapping[str, Any]) -> str:
        """Find the cheapest outbound and return flights over a range of days."""
        origin, destination, departure_text, return_text = _required(
            arguments, "origin", "destination", "departure_date", "return_date"
        )
        departure = _parse_date(departure_text, "invalid departure_date format {}")
        return_day = _parse_date(return_text, "invalid return_date format {}")
        if return_day < departure:
            raise _ToolFailure("return_date must be after departure_date")

        params = RoundTripParams(
            origin=origin,
            destination=destination,
            departure_date=departure,
            return_date=return_day,
            days_to_query=_int_arg(arguments, "days", 1),
            fare_type=_string_arg(arguments, "fare_type", DEFAULT_FARE_TYPE),
        )
        try:
            cheapest = self.client.find_cheapest_flights(params)
        except SmilesAPIError as exc:
            raise _ToolFailure(f"search failed: {exc}") from exc

        return _to_json({
            "outbound_per_day": [_summary(cf) for cf in cheapest.outbound_per_day] or None,
            "outbound_cheapest": _summary(cheapest.outbound_cheapest),
            "return_per_day": [_summary(cf) for cf in cheapest.return_per_day] or None,
            "return_cheapest": _summary(cheapest.return_cheapest),
        })

    @_tool
    def get_flight_taxes(self, arguments: Mapping[str, Any]) -> str:
        """Fetch boarding taxes for a flight and fare."""
        flight_uid, fare_uid = _required(arguments, "flight_uid", "fare_uid")
        try:
            return _to_json(self.client.get_boarding_tax(flight_uid, fare_uid).to_dict())
        except SmilesAPIError as exc:
            raise _ToolFailure(f"failed to get taxes: {exc}") from exc

    def handle_message(self, message: Any) -> dict[str, Any] | None:
        """Answer one JSON-RPC message; notifications get no answer."""
        if not isinstance(message, Mapping):
            return _error(None, INVALID_REQUEST, "Invalid Request")
        msg_id = message.get("id")
        if "id" not in message:
            return None
        method = message.get("method")
        if not isinstance(method, str):
            return _error(msg_id, INVALID_REQUEST, "Invalid Request")
        params = message.get("params")
        if not isinstance(params, Mapping):
            params = {}

        if method == "initialize":
            requested = params.get("protocolVersion")
            version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else LATEST_PROTOCOL_VERSION
            return _response(msg_id, {
                "protocolVersion": version,
                "capabilities": {"tools": {"listChanged": False}},
                "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
            })
        if method == "ping":
            return _response(msg_id, {})
        if method == "tools/list":
            return _response(msg_id, {"tools": self.list_tools()})
        if method != "tools/call":
            return _error(msg_id, METHOD_NOT_FOUND, "Method not found")

        name = params.get("name")
        if not isinstance(name, str):
            return _error(msg_id, INVALID_PARAMS, "tool name is required")
        try:
            result = self.call_tool(name, params.get("arguments"))
        except KeyError as exc:
            return _error(msg_id, INVALID_PARAMS, str(exc.args[0]))
        except Exception as exc:  # a failing tool must not stop the server
            return _error(msg_id, INTERNAL_ERROR, f"panic recovered in {name} tool handler: {exc}")
        return _response(msg_id, result.to_dict())

    def serve(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        """Read requests line by line from stdin and write answers to stdout."""
        stdin = sys.stdin if stdin is None else stdin
        stdout = sys.stdout if stdout is None else stdout
        for line in stdin:
            if not line.strip():
                continue
            try:
                response = self.handle_message(json.loads(line))
            except ValueError:
                response = _error(None, PARSE_ERROR, "Parse error")
            if response is not None:
                stdout.write(json.dumps(response, ensure_ascii=False) + "\n")
                stdout.flush()


def main(argv: list[str] | None = None) -> int:
    """Start the tool server on standard input and output."""
    api_key = os.environ.get("SMILES_API_KEY", "")
    if not api_key:
        print("Error: SMILES_API_KEY environment variable is required", file=sys.stderr)
        return 1
    with SmilesClient(api_key, os.environ.get("SMILES_BEARER_TOKEN", "")) as client:
        try:
            SmilesServer(client).serve(sys.stdin, sys.stdout)
        except OSError as exc:
            print(f"Server error: {exc}", file=sys.stderr)
            return 1
    return 0