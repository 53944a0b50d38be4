from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex

from ..pricing.money import to_display_string
from . import payment_methods, status as tx_status


class TransactionsTableModel(QAbstractTableModel):
    """
    Transaction history rows. The Total column shows the signed ledger value,
    so returns read as negative amounts.
    """
    HEADERS = ["ID", "Date", "Type", "Items", "Payment", "Status", "Total"]

    def __init__(self, rows: list):
        super().__init__()
        self._rows = rows

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        tx = self._rows[index.row()]
        c = index.column()
        if role in (Qt.DisplayRole, Qt.EditRole):
            mapping = [
                tx.id,
                tx.timestamp.strftime("%Y-%m-%d %H:%M"),
                "Return" if tx.is_return else "Sale",
                tx.item_count,
                payment_methods.label(tx.payment_method),
                tx_status.label(tx.status),
                to_display_string(tx.signed_total, symbol=""),
            ]
            return mapping[c] if c < len(mapping) else None
        if role == Qt.ToolTipRole and c == 5:
            return tx_status.description(tx.status)
        if role == Qt.TextAlignmentRole and c in (3, 6):
            return int(Qt.AlignRight | Qt.AlignVCenter)
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section] if section < len(self.HEADERS) else None
        return super().headerData(section, orientation, role)

    def at(self, row: int):
        return self._rows[row]

    def replace(self, rows: list):
        self.beginResetModel()
        self._rows = rows
        self.endResetModel()
