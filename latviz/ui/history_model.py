"""Qt table model over a ProbeHistory using the model/view pattern."""

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from latviz.history import ProbeHistory
from latviz.models import Measurement


class HistoryTableModel(QAbstractTableModel):
    """Read-only table of recent measurements, newest row first.

    Mirrors the history's bounded, most-recent-first ordering: each new
    measurement is inserted at row 0 and rows past the history's max_size are
    removed from the bottom with beginRemoveRows/endRemoveRows.
    """

    def __init__(self, history: ProbeHistory, parent=None):
        super().__init__(parent)
        self._history = history
        self._rows = list(history.measurements())

        self._columns = ["ID", "Time", "Latency (ms)", "Status"]
        self._no_status = "ERR"

        history.measurement_added.connect(self._on_measurement_added)
        history.changed.connect(self._on_history_changed)

    def rowCount(self, parent=QModelIndex()):
        """Return the number of rows (measurements)."""
        if parent.isValid():
            return 0
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        """Return the number of columns."""
        if parent.isValid():
            return 0
        return len(self._columns)

    def data(self, index, role=Qt.DisplayRole):
        """Return data for a given cell."""
        if not index.isValid():
            return None

        if index.row() >= len(self._rows) or index.row() < 0:
            return None

        measurement = self._rows[index.row()]
        col = index.column()

        if role == Qt.DisplayRole:
            if col == 0:  # ID
                return str(measurement.id)
            elif col == 1:  # Time
                return measurement.timestamp.astimezone().strftime("%H:%M:%S")
            elif col == 2:  # Latency
                return str(measurement.latency_ms)
            elif col == 3:  # Status
                if measurement.status is None:
                    return self._no_status
                return str(measurement.status)

        elif role == Qt.ToolTipRole:
            if col == 1:
                return measurement.iso_timestamp

        elif role == Qt.TextAlignmentRole:
            if col in (0, 2):
                return Qt.AlignRight | Qt.AlignVCenter
            elif col == 3:
                return Qt.AlignCenter
            else:
                return Qt.AlignLeft | Qt.AlignVCenter

        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        """Return header data."""
        if role == Qt.DisplayRole and orientation == Qt.Horizontal:
            if 0 <= section < len(self._columns):
                return self._columns[section]
        return None

    def flags(self, index):
        """Return item flags (read-only)."""
        if not index.isValid():
            return Qt.NoItemFlags
        return Qt.ItemIsEnabled | Qt.ItemIsSelectable

    def measurement_at(self, row: int) -> Measurement | None:
        if 0 <= row < len(self._rows):
            return self._rows[row]
        return None

    def _on_measurement_added(self, measurement: Measurement):
        """Insert the new row at the top, then trim the bottom to the history cap."""
        self.beginInsertRows(QModelIndex(), 0, 0)
        self._rows.insert(0, measurement)
        self.endInsertRows()

        max_rows = self._history.max_size
        if len(self._rows) > max_rows:
            self.beginRemoveRows(QModelIndex(), max_rows, len(self._rows) - 1)
            del self._rows[max_rows:]
            self.endRemoveRows()

    def _on_history_changed(self):
        # A reset empties the history without a per-row signal
        if self._rows and len(self._history) == 0:
            self.beginResetModel()
            self._rows = []
            self.endResetModel()
