"""State – table definition, table state and lifecycle phases."""
from mp_datatable.state.columns import ColumnDefinition, cell_value, initial_filters
from mp_datatable.state.table_state import TablePhase, TableState

__all__ = ["ColumnDefinition", "TablePhase", "TableState", "cell_value", "initial_filters"]
