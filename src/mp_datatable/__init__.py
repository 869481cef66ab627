"""
mp_datatable – remote-table data engine.

Import path convention::

    from mp_datatable.engine import PageEvent, SortEvent, TableController
    from mp_datatable.state import ColumnDefinition
    from mp_datatable.config.settings import TableSettings
    from mp_datatable.query import FilterOperator, FilterSpec, SortSpec
    from mp_datatable.kernel.errors import FetchError
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
