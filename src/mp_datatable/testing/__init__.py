"""Testing support – fakes and clocks for exercising a table without a server.

Typical ``respx`` wiring::

    endpoint = FakeTableEndpoint(make_rows(500))
    with respx.mock(base_url="https://api.test") as router:
        router.get("/students").mock(side_effect=endpoint)
"""

from mp_datatable.kernel.time import ManualClock
from mp_datatable.notifications import InMemoryNotifier
from mp_datatable.testing.fakes import FakeTableEndpoint, RecordingSleep, make_rows, table_payload

__all__ = [
    "FakeTableEndpoint",
    "InMemoryNotifier",
    "ManualClock",
    "RecordingSleep",
    "make_rows",
    "table_payload",
]
