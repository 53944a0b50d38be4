from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex

from ..pricing.money import to_display_string


class CartItemsModel(QAbstractTableModel):
    HEADERS = ["#", "Product", "Category", "Qty", "Unit Price", "Line Total"]

    def __init__(self, items=()):
        super().__init__()
        self._rows = list(items)

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, idx, role=Qt.DisplayRole):
        if not idx.isValid():
            return None
        it = self._rows[idx.row()]
        if role in (Qt.DisplayRole, Qt.EditRole):
            m = [
                idx.row() + 1,
                it.name or it.product_id,
                it.category,
                it.quantity,
                to_display_string(it.unit_price, symbol=""),
                to_display_string(it.line_total, symbol=""),
            ]
            return m[idx.column()]
        if role == Qt.TextAlignmentRole and idx.column() >= 3:
            return int(Qt.AlignRight | Qt.AlignVCenter)
        return None

    def headerData(self, s, o, role=Qt.DisplayRole):
        return self.HEADERS[s] if o == Qt.Horizontal and role == Qt.DisplayRole else super().headerData(s, o, role)

    def at(self, row: int):
        return self._rows[row]

    def replace(self, items):
        self.beginResetModel()
        self._rows = list(items)
        self.endResetModel()
