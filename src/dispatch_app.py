"""PyQt6 dispatch board for a ground-transportation business.

The window is a thin presentation layer over ``src.core``: it lets a
dispatcher browse and reschedule bookings on a calendar, print each
driver's daily manifest, mark leave days, and review revenue still owed by
clients. All scheduling and collection rules live in
the core package; this module only renders their results.

Data source
-----------
Bookings, drivers and leave days are read from a JSON dispatch feed. Point
the dashboard at it through the ``feed_file`` setting or the
``DISPATCH_FEED_FILE`` environment variable (a ``.env`` file next to the
application is honoured)::

    DISPATCH_FEED_FILE=/path/to/dispatch.json

Leave days toggled in the availability tab are kept for the session only.
"""

from __future__ import annotations

import logging
import sys
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Callable, List, Optional

import numpy as np
import pyqtgraph as pg
from dotenv import load_dotenv
from PyQt6.QtCore import QDate, Qt, pyqtSignal
from PyQt6.QtGui import QColor, QFont
from PyQt6.QtWidgets import (
    QAbstractItemView,
    QApplication,
    QComboBox,
    QDateEdit,
    QFileDialog,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QSizePolicy,
    QSplitter,
    QTabWidget,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from .core.availability import (
    AvailabilityLedger,
    LeaveEntry,
    availability_status,
    leave_overlay,
)
from .core.calendar_math import (
    CalendarUnit,
    advance,
    format_time,
    header_label,
    hour_rows,
    month_grid,
    month_weeks,
    same_day,
    today,
    week_grid,
)
from .core.collection import display_label, format_amount
from .core.filters import FilterCriteria, filter_calendar, filter_leave_overlay
from .core.manifest import (
    ManifestEntry,
    annotate_manifest,
    collection_total,
    daily_manifest,
    driver_report,
)
from .core.models import (
    AvailabilityStatus,
    Booking,
    BookingStatus,
    Driver,
    ServiceType,
    passenger_summary,
    to_local_naive,
)
from .core.time_slots import move_booking, row_height_for_zoom, slots_for_day
from .utils.booking_feed import DispatchFeed, DispatchFeedError, load_dispatch_feed
from .utils.csv_export import export_driver_report_csv
from .utils.pdf_exporter import export_manifest_pdf
from .utils.settings import (
    RuntimeConfig,
    SettingsManager,
    resolve_data_directory,
    resolve_runtime_config,
)
from .utils.share_text import build_manifest_text

logger = logging.getLogger(__name__)

pg.setConfigOptions(antialias=True, background=None, foreground="#f4f6fa")

APP_TITLE = "Dispatch Board"
APP_BUNDLE_ROOT = Path(__file__).resolve().parent
STYLE_FILE = APP_BUNDLE_ROOT / "resources" / "style.qss"
SETTINGS_FILE = resolve_data_directory() / "settings.json"

WEEKDAY_HEADERS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

GUTTER_WIDTH_PX = 56
COLUMN_WIDTH_PX = 150
DAY_HEADER_PX = 28
ALL_DAY_ROW_PX = 26
MONTH_CELL_HEIGHT_PX = 110
MONTH_CELL_MAX_ITEMS = 3


def _to_qdate(value: date) -> QDate:
    return QDate(value.year, value.month, value.day)


def _create_summary_card(
    title: str,
    value_text: str,
    detail_text: str,
) -> tuple[QFrame, QLabel, QLabel]:
    card = QFrame()
    card.setProperty("card", True)
    card.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)

    card_layout = QVBoxLayout(card)
    card_layout.setContentsMargins(16, 14, 16, 14)
    card_layout.setSpacing(6)

    title_label = QLabel(title)
    title_label.setProperty("role", "metricTitle")
    card_layout.addWidget(title_label)

    value_label = QLabel(value_text)
    value_label.setProperty("role", "metricValue")
    card_layout.addWidget(value_label)

    detail_label = QLabel(detail_text)
    detail_label.setWordWrap(True)
    detail_label.setProperty("role", "metricDetail")
    card_layout.addWidget(detail_label)

    card_layout.addStretch(1)
    return card, value_label, detail_label


def _configure_table(table: QTableWidget, headers: list[str]) -> None:
    table.setHorizontalHeaderLabels(headers)
    table.verticalHeader().setVisible(False)
    table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
    table.setSelectionMode(QTableWidget.SelectionMode.SingleSelection)
    table.setSelectionBehavior(QTableWidget.SelectionBehavior.SelectRows)
    table.setAlternatingRowColors(True)
    table.setVerticalScrollMode(QAbstractItemView.ScrollMode.ScrollPerPixel)
    table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)


def _set_table_item(
    table: QTableWidget,
    row: int,
    column: int,
    text: str,
    user_data: Any | None = None,
) -> None:
    item = QTableWidgetItem(text)
    item.setFlags(Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsSelectable)
    item.setTextAlignment(Qt.AlignmentFlag.AlignVCenter | Qt.AlignmentFlag.AlignLeft)
    if user_data is not None:
        item.setData(Qt.ItemDataRole.UserRole, user_data)
    table.setItem(row, column, item)


def _populate_driver_combo(combo: QComboBox, drivers: List[Driver]) -> None:
    current = combo.currentData()
    combo.blockSignals(True)
    combo.clear()
    for driver in drivers:
        combo.addItem(driver.name, driver.driver_id)
    index = combo.findData(current) if current is not None else -1
    combo.setCurrentIndex(index if index >= 0 else (0 if drivers else -1))
    combo.blockSignals(False)


class DispatchState:
    """Session state shared by all tabs: the feed plus the leave ledger."""

    def __init__(self, feed: DispatchFeed) -> None:
        self.drivers: List[Driver] = list(feed.drivers)
        self.bookings: List[Booking] = list(feed.bookings)
        self.ledger = AvailabilityLedger(feed.leaves)

    def driver(self, driver_id: Optional[str]) -> Optional[Driver]:
        return next((d for d in self.drivers if d.driver_id == driver_id), None)

    def booking(self, booking_id: Optional[str]) -> Optional[Booking]:
        return next((b for b in self.bookings if b.booking_id == booking_id), None)

    def replace_booking(self, updated: Booking) -> None:
        self.bookings = [
            updated if booking.booking_id == updated.booking_id else booking
            for booking in self.bookings
        ]


class CalendarTab(QWidget):
    """Month, week and day calendar of every booking plus driver leave.

    Clicking a booking selects it; clicking an hour slot (or a day in month
    view) then moves the selected booking there.
    """

    activity_event = pyqtSignal(str, str, str)
    bookings_changed = pyqtSignal()

    def __init__(
        self,
        state: DispatchState,
        config: RuntimeConfig,
        parent: QWidget | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        super().__init__(parent)
        self.state = state
        self.config = config
        self._clock = clock
        self.current_date: date = today(clock)
        self.unit = CalendarUnit.WEEK
        self.zoom_level = config.zoom_level
        self.selected_booking_id: Optional[str] = None
        self.slot_buttons: dict[str, QPushButton] = {}
        self.hour_cells: dict[tuple[date, int], QPushButton] = {}
        self.day_cells: dict[date, QPushButton] = {}
        self.leave_labels: dict[date, QLabel] = {}
        self._canvas_widgets: list[QWidget] = []

        layout = QVBoxLayout(self)
        layout.setSpacing(12)
        layout.setContentsMargins(0, 0, 0, 0)

        title = QLabel("Dispatch calendar")
        title.setProperty("role", "title")
        layout.addWidget(title)

        controls = QHBoxLayout()
        controls.setSpacing(10)
        self.view_combo = QComboBox()
        for unit in (CalendarUnit.MONTH, CalendarUnit.WEEK, CalendarUnit.DAY):
            self.view_combo.addItem(unit.value.title(), unit)
        self.view_combo.setCurrentIndex(self.view_combo.findData(self.unit))
        self.prev_button = QPushButton("‹")
        self.header_label = QLabel()
        self.header_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.header_label.setMinimumWidth(220)
        self.next_button = QPushButton("›")
        self.today_button = QPushButton("Today")
        self.zoom_combo = QComboBox()
        for level in range(1, 6):
            self.zoom_combo.addItem(f"Zoom {level}", level)
        self.zoom_combo.setCurrentIndex(self.zoom_combo.findData(self.zoom_level))
        controls.addWidget(self.view_combo)
        for widget in (self.prev_button, self.header_label, self.next_button, self.today_button):
            controls.addWidget(widget)
        controls.addStretch(1)
        controls.addWidget(self.zoom_combo)
        layout.addLayout(controls)

        filters = QHBoxLayout()
        filters.setSpacing(10)
        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search title, client or address…")
        self.service_combo = QComboBox()
        self.service_combo.addItem("All services", None)
        for service_type in ServiceType:
            self.service_combo.addItem(service_type.value.replace("_", " ").title(), service_type)
        self.status_combo = QComboBox()
        self.status_combo.addItem("All statuses", None)
        for status in BookingStatus:
            self.status_combo.addItem(status.value.replace("_", " ").title(), status)
        self.driver_filter_combo = QComboBox()
        self.driver_filter_combo.addItem("All drivers", None)
        for driver in state.drivers:
            self.driver_filter_combo.addItem(driver.name, driver.driver_id)
        filters.addWidget(self.search_input, 2)
        filters.addWidget(self.service_combo)
        filters.addWidget(self.status_combo)
        filters.addWidget(self.driver_filter_combo)
        layout.addLayout(filters)

        self.canvas = QWidget()
        self.scroll_area = QScrollArea()
        self.scroll_area.setWidgetResizable(False)
        self.scroll_area.setWidget(self.canvas)
        layout.addWidget(self.scroll_area, 1)

        self.hint_label = QLabel("Select a booking, then click a time slot or day to move it.")
        self.hint_label.setProperty("role", "hint")
        layout.addWidget(self.hint_label)

        self.view_combo.currentIndexChanged.connect(self._on_view_changed)
        self.zoom_combo.currentIndexChanged.connect(self._on_zoom_changed)
        self.prev_button.clicked.connect(lambda: self._step(-1))
        self.next_button.clicked.connect(lambda: self._step(1))
        self.today_button.clicked.connect(self._go_to_today)
        self.search_input.textChanged.connect(self.refresh)
        for combo in (self.service_combo, self.status_combo, self.driver_filter_combo):
            combo.currentIndexChanged.connect(self.refresh)

        self.refresh()

    def set_unit(self, unit: CalendarUnit) -> None:
        self.view_combo.setCurrentIndex(self.view_combo.findData(unit))

    def _on_view_changed(self) -> None:
        self.unit = CalendarUnit(self.view_combo.currentData())
        self.refresh()

    def _on_zoom_changed(self) -> None:
        self.zoom_level = self.zoom_combo.currentData()
        self.refresh()

    def _step(self, direction: int) -> None:
        self.current_date = advance(self.current_date, self.unit, direction)
        self.refresh()

    def _go_to_today(self) -> None:
        self.current_date = today(self._clock)
        self.refresh()

    def criteria(self) -> FilterCriteria:
        service_data = self.service_combo.currentData()
        status_data = self.status_combo.currentData()
        service_type = ServiceType(service_data) if service_data else None
        status = BookingStatus(status_data) if status_data else None
        driver_id = self.driver_filter_combo.currentData()
        return FilterCriteria(
            service_types=frozenset({service_type}) if service_type else frozenset(),
            statuses=frozenset({status}) if status else frozenset(),
            driver_ids=frozenset({driver_id}) if driver_id else frozenset(),
        )

    def visible_bookings(self) -> List[Booking]:
        return filter_calendar(self.state.bookings, self.search_input.text(), self.criteria())

    def visible_leaves(self) -> List[LeaveEntry]:
        entries = leave_overlay(self.state.ledger, self.state.drivers)
        return filter_leave_overlay(entries, self.search_input.text(), self.criteria())

    def _leave_text(self, day: date, leaves: List[LeaveEntry]) -> str:
        return ", ".join(entry.title for entry in leaves if same_day(entry.start_time, day))

    def _add_canvas_widget(
        self, widget: QWidget, x: int, y: int, width: int, height: int
    ) -> None:
        widget.setParent(self.canvas)
        widget.setGeometry(x, y, width, height)
        widget.show()
        self._canvas_widgets.append(widget)

    def _clear_canvas(self) -> None:
        for widget in self._canvas_widgets:
            widget.hide()
            widget.deleteLater()
        self._canvas_widgets = []
        self.slot_buttons = {}
        self.hour_cells = {}
        self.day_cells = {}
        self.leave_labels = {}

    def refresh(self) -> None:
        self.header_label.setText(header_label(self.current_date, self.unit))
        self._clear_canvas()
        bookings = self.visible_bookings()
        leaves = self.visible_leaves()
        if self.unit is CalendarUnit.MONTH:
            self._render_month(bookings, leaves)
        elif self.unit is CalendarUnit.WEEK:
            self._render_days(week_grid(self.current_date), bookings, leaves)
        else:
            self._render_days([self.current_date], bookings, leaves)

    def _booking_button(self, booking: Booking, show_details: bool) -> QPushButton:
        start_text = format_time(booking.start_time, self.config.time_format)
        text = f"{start_text} {booking.title}"
        if booking.is_unassigned:
            text = f"! {text}"
        if show_details and booking.client_name:
            text += f"\n{booking.client_name}"
        button = QPushButton(text)
        button.setProperty("booking", True)
        button.setProperty("unassigned", booking.is_unassigned)
        button.setProperty("selected", booking.booking_id == self.selected_booking_id)
        button.setToolTip(f"{booking.pickup_address} → {booking.dropoff_address}")
        button.clicked.connect(
            lambda _checked=False, booking_id=booking.booking_id: self.select_booking(booking_id)
        )
        self.slot_buttons[booking.booking_id] = button
        return button

    def _render_days(
        self,
        days: List[date],
        bookings: List[Booking],
        leaves: List[LeaveEntry],
    ) -> None:
        row_height = row_height_for_zoom(self.zoom_level)
        grid_start = self.config.grid_start_hour
        hours = hour_rows(grid_start)
        grid_top = DAY_HEADER_PX + ALL_DAY_ROW_PX
        current_day = today(self._clock)
        self.canvas.setFixedSize(
            GUTTER_WIDTH_PX + len(days) * COLUMN_WIDTH_PX,
            grid_top + int(len(hours) * row_height),
        )

        for index, hour in enumerate(hours):
            hour_text = format_time(datetime.combine(days[0], time(hour)), self.config.time_format)
            label = QLabel(hour_text)
            label.setProperty("role", "hint")
            self._add_canvas_widget(
                label, 0, grid_top + int(index * row_height), GUTTER_WIDTH_PX, 18
            )

        for column, day in enumerate(days):
            x = GUTTER_WIDTH_PX + column * COLUMN_WIDTH_PX
            day_label = QLabel(f"{day.strftime('%a')} {day.day}")
            day_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
            day_label.setProperty("role", "sectionLabel")
            day_label.setProperty("today", day == current_day)
            self._add_canvas_widget(day_label, x, 0, COLUMN_WIDTH_PX, DAY_HEADER_PX)

            leave_label = QLabel(self._leave_text(day, leaves))
            leave_label.setProperty("role", "leave")
            self._add_canvas_widget(
                leave_label, x, DAY_HEADER_PX, COLUMN_WIDTH_PX, ALL_DAY_ROW_PX
            )
            self.leave_labels[day] = leave_label

            for index, hour in enumerate(hours):
                cell = QPushButton()
                cell.setProperty("hourCell", True)
                cell.clicked.connect(
                    lambda _checked=False, target=datetime.combine(day, time(hour)): (
                        self._on_target_clicked(target)
                    )
                )
                self._add_canvas_widget(
                    cell,
                    x,
                    grid_top + int(index * row_height),
                    COLUMN_WIDTH_PX,
                    int(row_height),
                )
                self.hour_cells[(day, hour)] = cell

            for booking, slot in slots_for_day(bookings, day, grid_start, row_height):
                top, height = slot.top, slot.height
                if top + height <= 0:
                    continue
                if top < 0:
                    height += top
                    top = 0.0
                button = self._booking_button(booking, slot.show_details)
                self._add_canvas_widget(
                    button,
                    x + 4,
                    grid_top + int(round(top)),
                    COLUMN_WIDTH_PX - 8,
                    int(round(height)),
                )
                button.raise_()

    def _render_month(self, bookings: List[Booking], leaves: List[LeaveEntry]) -> None:
        weeks = month_weeks(self.current_date)
        current_day = today(self._clock)
        self.canvas.setFixedSize(
            7 * COLUMN_WIDTH_PX,
            DAY_HEADER_PX + len(weeks) * MONTH_CELL_HEIGHT_PX,
        )
        for column, name in enumerate(WEEKDAY_HEADERS):
            label = QLabel(name.upper())
            label.setAlignment(Qt.AlignmentFlag.AlignCenter)
            label.setProperty("role", "sectionLabel")
            self._add_canvas_widget(
                label, column * COLUMN_WIDTH_PX, 0, COLUMN_WIDTH_PX, DAY_HEADER_PX
            )

        ordered = sorted(bookings, key=lambda booking: to_local_naive(booking.start_time))
        for row, week in enumerate(weeks):
            for column, cell in enumerate(week):
                x = column * COLUMN_WIDTH_PX
                y = DAY_HEADER_PX + row * MONTH_CELL_HEIGHT_PX
                day_button = QPushButton(str(cell.day.day))
                day_button.setProperty("outOfMonth", not cell.in_month)
                day_button.setProperty("today", cell.day == current_day)
                day_button.clicked.connect(
                    lambda _checked=False, target=datetime.combine(cell.day, time.min): (
                        self._on_target_clicked(target)
                    )
                )
                self._add_canvas_widget(day_button, x, y, COLUMN_WIDTH_PX, MONTH_CELL_HEIGHT_PX)
                self.day_cells[cell.day] = day_button

                leave_text = self._leave_text(cell.day, leaves)
                offset = y + 24
                if leave_text:
                    leave_label = QLabel(leave_text)
                    leave_label.setProperty("role", "leave")
                    self._add_canvas_widget(leave_label, x + 4, offset, COLUMN_WIDTH_PX - 8, 18)
                    self.leave_labels[cell.day] = leave_label
                    offset += 20

                on_day = [booking for booking in ordered if same_day(booking.start_time, cell.day)]
                for booking in on_day[:MONTH_CELL_MAX_ITEMS]:
                    button = self._booking_button(booking, show_details=False)
                    self._add_canvas_widget(button, x + 4, offset, COLUMN_WIDTH_PX - 8, 18)
                    offset += 20
                if len(on_day) > MONTH_CELL_MAX_ITEMS:
                    more = QLabel(f"+{len(on_day) - MONTH_CELL_MAX_ITEMS} more")
                    more.setProperty("role", "hint")
                    self._add_canvas_widget(more, x + 4, offset, COLUMN_WIDTH_PX - 8, 16)

    def select_booking(self, booking_id: Optional[str]) -> None:
        if booking_id == self.selected_booking_id:
            booking_id = None
        self.selected_booking_id = booking_id
        for key, button in self.slot_buttons.items():
            button.setProperty("selected", key == booking_id)
            button.style().unpolish(button)
            button.style().polish(button)

    def _on_target_clicked(self, target: datetime) -> None:
        if self.selected_booking_id is not None:
            self.move_selected(target)
            return
        if self.unit is CalendarUnit.MONTH:
            self.current_date = target.date()
            self.set_unit(CalendarUnit.DAY)

    def move_selected(self, target: datetime) -> Optional[Booking]:
        booking = self.state.booking(self.selected_booking_id)
        if booking is None:
            return None
        moved = move_booking(booking, target, self.unit)
        self.state.replace_booking(moved)
        self.selected_booking_id = None
        self.refresh()
        when = (
            f"{moved.start_time.strftime('%a %d %b')} "
            f"{format_time(moved.start_time, self.config.time_format)}"
        )
        self.activity_event.emit("info", "Booking moved", f"{moved.title} now starts {when}.")
        self.bookings_changed.emit()
        return moved


class DriverAgendaTab(QWidget):
    """Daily manifest for one driver with share and print actions."""

    activity_event = pyqtSignal(str, str, str)

    def __init__(
        self,
        state: DispatchState,
        config: RuntimeConfig,
        parent: QWidget | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        super().__init__(parent)
        self.state = state
        self.config = config
        self._clock = clock
        self._entries: list[ManifestEntry] = []
        self._summary_labels: dict[str, tuple[QLabel, QLabel]] = {}

        layout = QVBoxLayout(self)
        layout.setSpacing(18)
        layout.setContentsMargins(0, 0, 0, 0)

        title = QLabel("Driver agenda")
        title.setProperty("role", "title")
        layout.addWidget(title)

        controls = QHBoxLayout()
        controls.setSpacing(10)
        self.driver_combo = QComboBox()
        controls.addWidget(QLabel("Driver"))
        controls.addWidget(self.driver_combo, 1)
        self.prev_button = QPushButton("‹")
        self.next_button = QPushButton("›")
        self.today_button = QPushButton("Today")
        self.date_edit = QDateEdit()
        self.date_edit.setCalendarPopup(True)
        self.date_edit.setDate(_to_qdate(today(self._clock)))
        controls.addWidget(self.prev_button)
        controls.addWidget(self.date_edit)
        controls.addWidget(self.next_button)
        controls.addWidget(self.today_button)
        layout.addLayout(controls)

        self.header_label = QLabel()
        self.header_label.setProperty("role", "subtitle")
        layout.addWidget(self.header_label)

        cards_layout = QHBoxLayout()
        cards_layout.setSpacing(12)
        jobs_card, jobs_value, jobs_detail = _create_summary_card("Jobs", "0", "No jobs scheduled.")
        self._summary_labels["jobs"] = (jobs_value, jobs_detail)
        collect_card, collect_value, collect_detail = _create_summary_card(
            "Cash to collect",
            format_amount(0.0, config.currency_symbol),
            "Nothing to collect on-site.",
        )
        self._summary_labels["collect"] = (collect_value, collect_detail)
        status_card, status_value, status_detail = _create_summary_card(
            "Availability", "—", "Select a driver."
        )
        self._summary_labels["availability"] = (status_value, status_detail)
        for card in (jobs_card, collect_card, status_card):
            cards_layout.addWidget(card)
        layout.addLayout(cards_layout)

        self.manifest_table = QTableWidget(0, 6)
        _configure_table(
            self.manifest_table,
            ["Time", "Service", "Route", "Client", "Pax", "Collect"],
        )
        layout.addWidget(self.manifest_table, 1)

        actions = QHBoxLayout()
        actions.addStretch(1)
        self.copy_button = QPushButton("Copy manifest")
        self.export_button = QPushButton("Export manifest to PDF")
        actions.addWidget(self.copy_button)
        actions.addWidget(self.export_button)
        layout.addLayout(actions)

        self.driver_combo.currentIndexChanged.connect(self.refresh)
        self.date_edit.dateChanged.connect(self.refresh)
        self.prev_button.clicked.connect(lambda: self._step(-1))
        self.next_button.clicked.connect(lambda: self._step(1))
        self.today_button.clicked.connect(self._go_to_today)
        self.copy_button.clicked.connect(self._on_copy_manifest)
        self.export_button.clicked.connect(self._on_export_pdf)

        self.set_drivers(state.drivers)

    def _emit_activity(self, severity: str, title: str, message: str) -> None:
        self.activity_event.emit(severity, title, message)

    def set_drivers(self, drivers: List[Driver]) -> None:
        _populate_driver_combo(self.driver_combo, drivers)
        self.refresh()

    def selected_driver(self) -> Optional[Driver]:
        return self.state.driver(self.driver_combo.currentData())

    def selected_day(self) -> date:
        return self.date_edit.date().toPyDate()

    def set_day(self, day: date) -> None:
        self.date_edit.setDate(_to_qdate(day))

    def _step(self, direction: int) -> None:
        self.set_day(advance(self.selected_day(), CalendarUnit.DAY, direction))

    def _go_to_today(self) -> None:
        self.set_day(today(self._clock))

    @property
    def entries(self) -> list[ManifestEntry]:
        return list(self._entries)

    def refresh(self) -> None:
        driver = self.selected_driver()
        day = self.selected_day()
        self.header_label.setText(header_label(day, CalendarUnit.DAY))

        if driver is None:
            self._entries = []
        else:
            manifest = daily_manifest(driver.driver_id, day, self.state.bookings)
            self._entries = annotate_manifest(manifest)

        fmt = self.config.time_format
        currency = self.config.currency_symbol
        self.manifest_table.setRowCount(len(self._entries))
        for row, entry in enumerate(self._entries):
            booking = entry.booking
            end_text = format_time(booking.end_time, fmt) if booking.end_time else "TBD"
            _set_table_item(
                self.manifest_table,
                row,
                0,
                f"{format_time(booking.start_time, fmt)} - {end_text}",
                user_data=booking.booking_id,
            )
            _set_table_item(self.manifest_table, row, 1, booking.title)
            route = booking.pickup_address
            if booking.stop_address:
                route += f" → {booking.stop_address}"
            route += f" → {booking.dropoff_address}"
            _set_table_item(self.manifest_table, row, 2, route)
            _set_table_item(self.manifest_table, row, 3, booking.client_name)
            _set_table_item(self.manifest_table, row, 4, passenger_summary(booking))
            collect_text = "—"
            if entry.collection is not None:
                collect_text = (
                    f"{format_amount(entry.collection.amount, currency)} "
                    f"({display_label(entry.collection)})"
                )
            _set_table_item(self.manifest_table, row, 5, collect_text)
        self.manifest_table.resizeRowsToContents()

        has_driver = driver is not None
        self.copy_button.setEnabled(has_driver)
        self.export_button.setEnabled(has_driver)
        self._update_summary_cards(driver, day)

    def _update_summary_cards(self, driver: Optional[Driver], day: date) -> None:
        jobs_value, jobs_detail = self._summary_labels["jobs"]
        jobs_value.setText(str(len(self._entries)))
        if self._entries:
            first = self._entries[0].booking.start_time
            jobs_detail.setText(
                f"First pickup at {format_time(first, self.config.time_format)}."
            )
        else:
            jobs_detail.setText("No jobs scheduled.")

        collect_value, collect_detail = self._summary_labels["collect"]
        collecting = [entry for entry in self._entries if entry.collection is not None]
        collect_value.setText(
            format_amount(collection_total(self._entries), self.config.currency_symbol)
        )
        if collecting:
            job_label = "job" if len(collecting) == 1 else "jobs"
            collect_detail.setText(f"Collect on-site for {len(collecting)} {job_label}.")
        else:
            collect_detail.setText("Nothing to collect on-site.")

        status_value, status_detail = self._summary_labels["availability"]
        if driver is None:
            status_value.setText("—")
            status_detail.setText("Select a driver.")
            return
        status = availability_status(
            driver.driver_id, day, self.state.ledger, self.state.bookings
        )
        status_value.setText(status.value)
        if status is AvailabilityStatus.ON_LEAVE and self._entries:
            status_detail.setText("Driver is on leave but still has jobs assigned.")
        else:
            status_detail.setText(f"{driver.name} ({driver.role.value.title()})")

    def manifest_text(self) -> str:
        driver = self.selected_driver()
        if driver is None:
            return ""
        return build_manifest_text(
            driver,
            self.selected_day(),
            self._entries,
            time_format=self.config.time_format,
            currency=self.config.currency_symbol,
        )

    def _on_copy_manifest(self) -> None:
        text = self.manifest_text()
        if not text:
            return
        QApplication.clipboard().setText(text)
        self._emit_activity(
            "success",
            "Manifest copied",
            f"{len(self._entries)} job(s) copied to the clipboard.",
        )

    def _on_export_pdf(self) -> None:
        driver = self.selected_driver()
        if driver is None:
            return
        day = self.selected_day()
        default_name = f"manifest_{driver.name.replace(' ', '_')}_{day.isoformat()}.pdf"
        file_name, _ = QFileDialog.getSaveFileName(
            self,
            "Export Manifest to PDF",
            str(Path.home() / default_name),
            "PDF Files (*.pdf)",
        )
        if not file_name:
            self._emit_activity(
                "info",
                "Manifest export",
                "Export cancelled before choosing a destination file.",
            )
            return
        try:
            result_path = export_manifest_pdf(
                file_name,
                driver,
                day,
                self._entries,
                time_format=self.config.time_format,
                currency=self.config.currency_symbol,
            )
        except Exception as exc:  # pylint: disable=broad-except
            QMessageBox.critical(
                self,
                "Export Failed",
                f"The manifest could not be exported.\n\nDetails: {exc}",
            )
            self._emit_activity("error", "Manifest export", f"Export failed: {exc}")
            return
        self._emit_activity("success", "Manifest export", f"Manifest PDF saved to {result_path}")


class AvailabilityTab(QWidget):
    """Month grid where clicking a day toggles the driver's leave."""

    activity_event = pyqtSignal(str, str, str)
    leave_changed = pyqtSignal()

    def __init__(
        self,
        state: DispatchState,
        parent: QWidget | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        super().__init__(parent)
        self.state = state
        self._clock = clock
        self.current_date: date = today(clock)
        self.day_buttons: dict[date, QPushButton] = {}

        layout = QVBoxLayout(self)
        layout.setSpacing(18)
        layout.setContentsMargins(0, 0, 0, 0)

        title = QLabel("Driver availability")
        title.setProperty("role", "title")
        layout.addWidget(title)

        controls = QHBoxLayout()
        controls.setSpacing(10)
        self.driver_combo = QComboBox()
        controls.addWidget(QLabel("Driver"))
        controls.addWidget(self.driver_combo, 1)
        self.prev_button = QPushButton("‹")
        self.header_label = QLabel()
        self.header_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.header_label.setMinimumWidth(160)
        self.next_button = QPushButton("›")
        self.today_button = QPushButton("Jump to today")
        for widget in (self.prev_button, self.header_label, self.next_button, self.today_button):
            controls.addWidget(widget)
        layout.addLayout(controls)

        self._grid = QGridLayout()
        self._grid.setSpacing(6)
        layout.addLayout(self._grid)

        hint = QLabel(
            "Click a day to mark the driver on leave; click again to make them available."
        )
        hint.setWordWrap(True)
        hint.setProperty("role", "hint")
        layout.addWidget(hint)
        layout.addStretch(1)

        self.driver_combo.currentIndexChanged.connect(self.refresh)
        self.prev_button.clicked.connect(lambda: self._step(-1))
        self.next_button.clicked.connect(lambda: self._step(1))
        self.today_button.clicked.connect(self._go_to_today)

        self.set_drivers(state.drivers)

    def set_drivers(self, drivers: List[Driver]) -> None:
        _populate_driver_combo(self.driver_combo, drivers)
        self.refresh()

    def selected_driver_id(self) -> Optional[str]:
        return self.driver_combo.currentData()

    def _step(self, direction: int) -> None:
        self.current_date = advance(self.current_date, CalendarUnit.MONTH, direction)
        self.refresh()

    def _go_to_today(self) -> None:
        self.current_date = today(self._clock)
        self.refresh()

    def _clear_grid(self) -> None:
        while self._grid.count():
            item = self._grid.takeAt(0)
            widget = item.widget() if item is not None else None
            if widget is not None:
                widget.deleteLater()
        self.day_buttons = {}

    def refresh(self) -> None:
        self.header_label.setText(header_label(self.current_date, CalendarUnit.MONTH))
        self._clear_grid()

        for column, name in enumerate(WEEKDAY_HEADERS):
            label = QLabel(name.upper())
            label.setAlignment(Qt.AlignmentFlag.AlignCenter)
            label.setProperty("role", "sectionLabel")
            self._grid.addWidget(label, 0, column)

        driver_id = self.selected_driver_id()
        current_day = today(self._clock)
        for index, cell in enumerate(month_grid(self.current_date)):
            button = QPushButton(str(cell.day.day))
            button.setCheckable(True)
            button.setEnabled(driver_id is not None)
            button.setProperty("outOfMonth", not cell.in_month)
            button.setProperty("today", cell.day == current_day)
            if driver_id is not None:
                button.setChecked(self.state.ledger.is_on_leave(driver_id, cell.day))
            button.clicked.connect(lambda _checked=False, day=cell.day: self._on_day_clicked(day))
            self._grid.addWidget(button, 1 + index // 7, index % 7)
            self.day_buttons[cell.day] = button

    def _on_day_clicked(self, day: date) -> None:
        driver_id = self.selected_driver_id()
        if driver_id is None:
            return
        on_leave = self.state.ledger.toggle_leave(driver_id, day)
        button = self.day_buttons.get(day)
        if button is not None:
            button.setChecked(on_leave)
        driver = self.state.driver(driver_id)
        name = driver.name if driver else driver_id
        state_text = "on leave" if on_leave else "available"
        self.activity_event.emit(
            "info", "Availability updated", f"{name} is {state_text} on {day.isoformat()}."
        )
        self.leave_changed.emit()


class DriverReportsTab(QWidget):
    """Revenue and outstanding client payments per driver."""

    activity_event = pyqtSignal(str, str, str)

    def __init__(
        self,
        state: DispatchState,
        config: RuntimeConfig,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.state = state
        self.config = config
        self._summary_labels: dict[str, tuple[QLabel, QLabel]] = {}
        self._report = None

        self._view_background = QColor("#101a2b")
        self._axis_text_color = QColor("#dee7ff")
        self._revenue_color = QColor("#35c4c7")
        self._outstanding_color = QColor("#ff7b7b")

        layout = QVBoxLayout(self)
        layout.setSpacing(18)
        layout.setContentsMargins(0, 0, 0, 0)

        title = QLabel("Driver reports")
        title.setProperty("role", "title")
        layout.addWidget(title)

        controls = QHBoxLayout()
        controls.setSpacing(10)
        self.driver_combo = QComboBox()
        controls.addWidget(QLabel("Driver"))
        controls.addWidget(self.driver_combo, 1)
        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search by service or client…")
        controls.addWidget(self.search_input, 2)
        self.export_button = QPushButton("Export statement (CSV)")
        controls.addWidget(self.export_button)
        layout.addLayout(controls)

        cards_layout = QHBoxLayout()
        cards_layout.setSpacing(12)
        zero = format_amount(0.0, config.currency_symbol)
        for key, caption, detail in (
            ("count", "Total services", "All bookings assigned to the driver."),
            ("revenue", "Total revenue generated", "Sum of client prices."),
            ("outstanding", "Outstanding client payments", "Unpaid and partially paid bookings."),
        ):
            card, value, detail_label = _create_summary_card(
                caption, "0" if key == "count" else zero, detail
            )
            self._summary_labels[key] = (value, detail_label)
            cards_layout.addWidget(card)
        layout.addLayout(cards_layout)

        self.bookings_table = QTableWidget(0, 5)
        _configure_table(self.bookings_table, ["Date", "Service", "Client", "Status", "Revenue"])
        layout.addWidget(self.bookings_table, 1)

        self.revenue_plot = pg.PlotWidget()
        self.revenue_plot.setBackground(self._view_background)
        self.revenue_plot.setMenuEnabled(False)
        self.revenue_plot.setMouseEnabled(x=False, y=False)
        self.revenue_plot.hideButtons()
        self.revenue_plot.setLabel("left", f"Amount ({config.currency_symbol})")
        self.revenue_plot.setMinimumHeight(220)
        self.revenue_legend = self.revenue_plot.addLegend(offset=(10, 10))
        layout.addWidget(self.revenue_plot)

        self.driver_combo.currentIndexChanged.connect(self.refresh)
        self.search_input.textChanged.connect(self.refresh)
        self.export_button.clicked.connect(self._on_export_csv)

        self.set_drivers(state.drivers)

    def set_drivers(self, drivers: List[Driver]) -> None:
        _populate_driver_combo(self.driver_combo, drivers)
        self.refresh()

    def refresh(self) -> None:
        driver = self.state.driver(self.driver_combo.currentData())
        currency = self.config.currency_symbol
        if driver is None:
            self._report = None
            self.bookings_table.setRowCount(0)
            self.export_button.setEnabled(False)
            zero = format_amount(0.0, currency)
            self._summary_labels["count"][0].setText("0")
            self._summary_labels["revenue"][0].setText(zero)
            self._summary_labels["outstanding"][0].setText(zero)
        else:
            self._report = driver_report(
                driver.driver_id, self.state.bookings, self.search_input.text()
            )
            summary = self._report.summary
            self._summary_labels["count"][0].setText(str(summary.count))
            self._summary_labels["revenue"][0].setText(
                format_amount(summary.total_revenue, currency)
            )
            self._summary_labels["outstanding"][0].setText(
                format_amount(summary.total_outstanding, currency)
            )

            listed = sorted(self._report.bookings, key=lambda b: b.start_time, reverse=True)
            self.bookings_table.setRowCount(len(listed))
            for row, booking in enumerate(listed):
                status = booking.client_payment_status
                _set_table_item(
                    self.bookings_table,
                    row,
                    0,
                    booking.start_time.strftime("%Y-%m-%d %H:%M"),
                    user_data=booking.booking_id,
                )
                _set_table_item(self.bookings_table, row, 1, booking.title)
                _set_table_item(self.bookings_table, row, 2, booking.client_name)
                _set_table_item(self.bookings_table, row, 3, status.value if status else "—")
                _set_table_item(
                    self.bookings_table, row, 4, format_amount(booking.price, currency)
                )
            self.export_button.setEnabled(True)
        self._refresh_chart()

    def _refresh_chart(self) -> None:
        self.revenue_plot.clear()
        if self.revenue_legend is not None:
            self.revenue_legend.clear()
        drivers = self.state.drivers
        if not drivers:
            return
        revenue = np.zeros(len(drivers), dtype=float)
        outstanding = np.zeros(len(drivers), dtype=float)
        for index, driver in enumerate(drivers):
            summary = driver_report(driver.driver_id, self.state.bookings).summary
            revenue[index] = summary.total_revenue
            outstanding[index] = summary.total_outstanding

        x = np.arange(len(drivers), dtype=float)
        width = 0.38
        self.revenue_plot.addItem(
            pg.BarGraphItem(
                x=x - width / 2,
                height=revenue,
                width=width,
                brush=pg.mkBrush(self._revenue_color),
                name="Revenue",
            )
        )
        self.revenue_plot.addItem(
            pg.BarGraphItem(
                x=x + width / 2,
                height=outstanding,
                width=width,
                brush=pg.mkBrush(self._outstanding_color),
                name="Outstanding",
            )
        )
        bottom_axis = self.revenue_plot.getAxis("bottom")
        bottom_axis.setTicks([[(index, driver.name) for index, driver in enumerate(drivers)]])
        bottom_axis.setTextPen(pg.mkPen(self._axis_text_color))
        upper = float(max(revenue.max(), outstanding.max()))
        self.revenue_plot.setYRange(0, upper * 1.15 if upper > 0 else 1.0, padding=0.02)

    def _on_export_csv(self) -> None:
        driver = self.state.driver(self.driver_combo.currentData())
        if driver is None or self._report is None:
            return
        default_name = f"statement_{driver.name.replace(' ', '_')}.csv"
        file_name, _ = QFileDialog.getSaveFileName(
            self,
            "Export Driver Statement",
            str(Path.home() / default_name),
            "CSV Files (*.csv)",
        )
        if not file_name:
            return
        try:
            result_path = export_driver_report_csv(
                file_name, driver, self._report, currency=self.config.currency_symbol
            )
        except OSError as exc:
            QMessageBox.critical(self, "Export Failed", f"Could not write statement: {exc}")
            self.activity_event.emit("error", "Statement export", f"Export failed: {exc}")
            return
        self.activity_event.emit("success", "Statement export", f"Statement saved to {result_path}")


class DispatchApp(QMainWindow):
    """Main window that orchestrates the individual tabs."""

    def __init__(
        self,
        state: DispatchState,
        config: RuntimeConfig,
        settings_manager: SettingsManager,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        super().__init__()
        self.state = state
        self.config = config
        self.settings_manager = settings_manager

        self.setWindowTitle(APP_TITLE)
        window_size = self.settings_manager.data.get("window_size", {})
        self.resize(
            int(window_size.get("width", 1180)),
            int(window_size.get("height", 760)),
        )

        splitter = QSplitter(Qt.Orientation.Horizontal)
        self.tabs = QTabWidget()
        splitter.addWidget(self.tabs)

        activity_panel = QWidget()
        activity_layout = QVBoxLayout(activity_panel)
        activity_layout.setContentsMargins(16, 16, 16, 16)
        activity_label = QLabel("Activity")
        activity_label.setProperty("role", "sectionLabel")
        activity_layout.addWidget(activity_label)
        self.activity_list = QListWidget()
        activity_layout.addWidget(self.activity_list, 1)
        splitter.addWidget(activity_panel)
        splitter.setStretchFactor(0, 4)
        splitter.setStretchFactor(1, 1)
        self.setCentralWidget(splitter)

        self.calendar_tab = CalendarTab(state, config, clock=clock)
        self.agenda_tab = DriverAgendaTab(state, config, clock=clock)
        self.availability_tab = AvailabilityTab(state, clock=clock)
        self.reports_tab = DriverReportsTab(state, config)

        self.tabs.addTab(self.calendar_tab, "Calendar")
        self.tabs.addTab(self.agenda_tab, "Driver Agenda")
        self.tabs.addTab(self.availability_tab, "Availability")
        self.tabs.addTab(self.reports_tab, "Driver Reports")

        for tab in (self.calendar_tab, self.agenda_tab, self.availability_tab, self.reports_tab):
            tab.activity_event.connect(self.log_activity)
        self.availability_tab.leave_changed.connect(self.agenda_tab.refresh)
        self.availability_tab.leave_changed.connect(self.calendar_tab.refresh)
        self.calendar_tab.bookings_changed.connect(self.agenda_tab.refresh)
        self.calendar_tab.bookings_changed.connect(self.reports_tab.refresh)

        self.log_activity(
            "info",
            "Dispatch feed",
            (
                f"Loaded {len(state.drivers)} driver{'s' if len(state.drivers) != 1 else ''} "
                f"and {len(state.bookings)} booking{'s' if len(state.bookings) != 1 else ''}."
            ),
        )

    def log_activity(self, severity: str, title: str, message: str) -> None:
        level = {"error": logging.ERROR, "warning": logging.WARNING}.get(severity, logging.INFO)
        logger.log(level, "%s: %s", title, message)
        item = QListWidgetItem(f"[{severity.upper()}] {title}\n{message}")
        item.setData(Qt.ItemDataRole.UserRole, severity)
        self.activity_list.insertItem(0, item)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self.settings_manager.update(
            {"window_size": {"width": self.width(), "height": self.height()}}
        )
        super().closeEvent(event)


def load_stylesheet() -> str:
    if STYLE_FILE.exists():
        return STYLE_FILE.read_text(encoding="utf-8")
    return ""


def bootstrap_app() -> int:
    """Configure the QApplication and start the GUI loop.

    Returns the exit code produced by ``QApplication.exec``.
    Raises ``DispatchFeedError`` if the configured feed cannot be loaded.
    """

    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings_manager = SettingsManager(SETTINGS_FILE)
    config = resolve_runtime_config(settings_manager.data)
    feed = load_dispatch_feed(config.feed_file) if config.feed_file else DispatchFeed()

    app = QApplication.instance() or QApplication(sys.argv)
    app.setFont(QFont("Segoe UI", 10))
    stylesheet = load_stylesheet()
    if stylesheet:
        app.setStyleSheet(stylesheet)

    window = DispatchApp(DispatchState(feed), config, settings_manager)
    window.show()
    if config.feed_file is None:
        window.log_activity(
            "warning",
            "No dispatch feed",
            "Set DISPATCH_FEED_FILE or the feed_file setting to load bookings.",
        )
    return app.exec()


__all__ = [
    "AvailabilityTab",
    "CalendarTab",
    "DispatchApp",
    "DispatchFeedError",
    "DispatchState",
    "DriverAgendaTab",
    "DriverReportsTab",
    "bootstrap_app",
]
