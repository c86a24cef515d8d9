# smilesflights

Search the Smiles programme for award flights paid in miles, compare
consecutive days to find the cheapest one, and look up boarding taxes.

The package can be used in three ways:

- `smiles` is a command that searches one or more destinations across a
  range of days and prints the cheapest flight for each day.
- `smiles-mcp` is a tool server that speaks line-delimited JSON-RPC on
  standard input and output.
- As a Python library, through `smilesflights.client.SmilesClient` and
  the dataclasses in `smilesflights.model`.

## Installation

```
pip install .
```

The only runtime dependency is `httpx`. Install the `test` extra to run
the tests with pytest.

## Credentials

Both commands read their credentials from the environment.

- `SMILES_API_KEY` is required. It is sent as the `x-api-key` header. If
  it is missing, both commands print an error and exit with status 1.
- `SMILES_BEARER_TOKEN` is optional. When it is set, it is sent as
  `authorization: Bearer <value>`.

## The `smiles` command

To search one way for 30 days from 1 June, for three destinations:

```
smiles EZE MAD,BCN,FCO 2026-06-01 30
```

To search a round trip, with outbound days from 1 June and return days
from 20 June, 10 days each:

```
smiles EZE MAD,BCN 2026-06-01 2026-06-20 10
```

Four arguments mean a one-way search and five mean a round trip. Any
other count prints the usage text and exits with status 1. The input
rules are:

- The origin and each destination must be three characters long.
- Separate several destinations with commas. Each destination is upper-cased.
- Dates are written `YYYY-MM-DD`.
- The return date may not come before the departure date.
- The number of days must be between 1 and 31.

For each day that has a match, the command prints the flight with the
fewest miles in the `SMILES_CLUB` fare. Each line shows:

- the departure date
- the route
- the cabin
- the airline
- the number of stops
- the miles
- the fare's airline amount in USD

After the per-day lines, the overall cheapest flight is printed with
the `★ Más barato:` mark. A line of `═` characters separates one
destination from the next. All messages are in Spanish. If every search
for a destination fails, the error goes to standard error and the
command goes on to the next destination.

## The `smiles-mcp` server

```
smiles-mcp
```

The server reads one JSON-RPC 2.0 message per line from standard input
and writes one response per line to standard output. It answers these
methods:

- `initialize`
- `ping`
- `tools/list`
- `tools/call`

Messages without an `id` are treated as notifications and get no answer.
The server offers three tools:

| Tool | Required arguments | Optional arguments |
|------|--------------------|--------------------|
| `search_flights` | `origin`, `destination`, `departure_date` | `cabin` (default `all`), `adults` (default 1) |
| `find_cheapest_flights` | `origin`, `destination`, `departure_date`, `return_date` | `days` (default 1), `fare_type` (default `SMILES_CLUB`) |
| `get_flight_taxes` | `flight_uid`, `fare_uid` | none |

The results come back as indented JSON text:

- `search_flights` returns the full search response.
- `find_cheapest_flights` returns `outbound_per_day`, `outbound_cheapest`,
  `return_per_day` and `return_cheapest`, each one summarised by date,
  origin, destination, airline, cabin, stops, miles and fare type.
- `get_flight_taxes` returns the boarding tax totals.

Missing arguments, malformed dates and failed searches come back as
tool results with `isError: true`. An unknown tool name gets a JSON-RPC
`-32602` error.

The same server can be driven from Python through
`smilesflights.server.SmilesServer`, which has these methods:

- `list_tools()`
- `call_tool(name, arguments)`
- `handle_message(message)`
- `serve(stdin, stdout)`

## Library use

```python
from datetime import date

from smilesflights.client import RoundTripParams, SearchParams, SmilesClient

with SmilesClient(api_key="placeholder", bearer_token="", http_client=None) as client:
    data = client.search_flights(
        SearchParams(origin="EZE", destination="MAD", date=date(2026, 6, 1))
    )
    for segment in data.requested_flight_segment_list:
        for flight in segment.flight_list:
            print(flight.airline.name, [fare.miles for fare in flight.fare_list])

    result = client.find_cheapest_flights(
        RoundTripParams(
            origin="EZE",
            destination="MAD",
            departure_date=date(2026, 6, 1),
            return_date=date(2026, 6, 20),
            days_to_query=5,
            fare_type="SMILES_CLUB",
            one_way=False,
        )
    )
    if result.outbound_cheapest is not None:
        print(result.outbound_cheapest.fare.miles)

    tax = client.get_boarding_tax("flight-uid", "fare-uid")
    print(tax.totals.total.money)
```

You can pass your own `httpx.Client` as `http_client`. A client passed
in this way is not closed by `SmilesClient.close()`.

`find_cheapest_flights` clamps `days_to_query` to the range 1 to 31. It
searches each day separately and runs at most three requests at a time.
Days whose search fails are skipped. If every search fails, it raises
`SmilesAPIError`. A round-trip search without a `return_date` raises
`ValueError`.

`SmilesAPIError` is also raised when a request fails in these ways:

- a transport error
- a non-200 status
- an empty body
- JSON that cannot be decoded
- a response of the wrong shape

`build_search_url`, `build_tax_url`, `get_fare_by_type` and
`find_cheapest` in `smilesflights.client` need no network access.

`smilesflights.model` holds dataclasses for the API documents, from
`Data` and `Flight` down to `Fare` and `BoardingTax`. Each of them has
`from_dict` and `to_dict`. Flight timestamps must have the form
`YYYY-MM-DDTHH:MM:SS` and are read as UTC. Fare amounts may be sent
either as numbers or as numeric strings. Malformed documents raise
`ModelError`.

## What it does not do

- Requests go out through plain `httpx` with browser-like headers. The
  package does not imitate a browser's TLS or HTTP/2 fingerprint, so the
  API may refuse requests that a browser would get through.
- `smiles-mcp` implements only the methods listed above, over stdio. It
  has no resources, no prompts and no other transports.
- The `outbound_tax` and `return_tax` fields of `CheapestResult` are
  never filled in. To get taxes, call `get_boarding_tax` yourself. The
  `smiles` command does not look taxes up.