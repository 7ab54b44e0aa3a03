# UI.py
"""PySide6 user interface for the Bifrost calculator.

Structure
---------
- Calculator UI: input field, serial port settings, button grid and history list
- Settings UI: modal dialog for user preferences (config.json)

Responsibilities (Calculator)
-----------------------------
- Build window, input field, layout and buttons
- Translate button clicks into Tokens for the ExpressionEditor
- Hand the finished expression to the device in a worker thread
- Render results into the history list and show device errors as dialogs
- Clipboard integration: Shift + click on a history entry copies its result

Threading Note
--------------
The serial round trip blocks for up to the read timeout, so it runs off the UI
thread in Worker(QObject). The outcome comes back through a Qt signal. While a
request is in flight the Send button is disabled and the Calculator refuses a
second request.
"""

from PySide6 import QtWidgets
from PySide6.QtCore import Qt, QObject, Signal
import sys
import logging
import threading
from pynput.keyboard import Controller
import pyperclip
from . import error as E
from . import config_manager as config_manager
from .Transport import list_ports, parse_baudrate
from .ExpressionEditor import Token
from .EvaluationBridge import EvaluationBridge
from .Session import Calculator

logger = logging.getLogger(__name__)


def is_shift_pressed():
    """Used for the "shift to copy" gesture on the history list."""
    keyboard_controller = Controller()
    return keyboard_controller.shift_pressed


class Worker(QObject):
    """

    Lives for one evaluation. run_Calc is the target of a separate thread; it performs the
    blocking serial round trip and emits the outcome (NormalizedValue or error) back to the UI.

    """

    job_finished = Signal(object, object)

    def __init__(self, calculator, request, port, baudrate):
        super().__init__()
        self.calculator = calculator
        self.request = request
        self.port = port
        self.baudrate = baudrate

    def run_Calc(self):
        outcome = self.calculator.run_evaluation(self.request, self.port, self.baudrate)
        self.job_finished.emit(outcome, self.request)


class SettingsDialog(QtWidgets.QDialog):
    """

    Settings window. Every key in config.json becomes a row:
    1. Checkboxes   (boolean settings)
    2. Input Fields (numbers and text)

    """

    settings_saved = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.widgets = {}

        self.setWindowTitle("Bifrost Settings")
        self.setMinimumSize(360, 280)

        main_layout = QtWidgets.QVBoxLayout(self)

        self.setting_value_list = config_manager.load_settings()
        self.setting_description_list = config_manager.load_setting_description("all")

        for key_value, value in self.setting_value_list.items():
            description = self.setting_description_list.get(key_value, key_value)

            if isinstance(value, bool):
                checkbox = QtWidgets.QCheckBox(description)
                checkbox.setChecked(value)
                main_layout.addWidget(checkbox)
                self.widgets[key_value] = checkbox

            else:
                row_h_layout = QtWidgets.QHBoxLayout()
                main_layout.addLayout(row_h_layout)
                label = QtWidgets.QLabel(description + ":")
                input_field = QtWidgets.QLineEdit()
                input_field.setPlaceholderText(str(value))  # Current value as placeholder
                row_h_layout.addWidget(label)
                row_h_layout.addWidget(input_field)
                row_h_layout.setStretch(1, 1)
                self.widgets[key_value] = input_field

        button_box = QtWidgets.QDialogButtonBox(QtWidgets.QDialogButtonBox.Ok | QtWidgets.QDialogButtonBox.Cancel)
        main_layout.addWidget(button_box)
        main_layout.addStretch(1)

        button_box.accepted.connect(lambda: self.save_settings(self.setting_value_list))
        button_box.rejected.connect(self.reject)

        self.update_darkmode()

    def save_settings(self, setting_value_list):
        for key_value, widget in self.widgets.items():

            if isinstance(widget, QtWidgets.QCheckBox):
                setting_value_list[key_value] = widget.isChecked()
                continue

            new_value_str = widget.text().strip()
            if new_value_str == "":
                continue  # Blank keeps the old value

            old_value = setting_value_list[key_value]
            if isinstance(old_value, int):
                try:
                    new_value_int = int(new_value_str)
                    if new_value_int < 0 or (key_value == "baudrate" and new_value_int == 0):
                        raise ValueError(f"'{new_value_int}' is out of range.")
                except ValueError as e:
                    logger.warning("Invalid input for %s: %s", key_value, e)
                    QtWidgets.QMessageBox.critical(self, "Invalid Input:",
                                                   f"Error in input for '{key_value}':\n\n{e}\n\nPlease correct your input.")
                    return  # Stop saving!
                setting_value_list[key_value] = new_value_int
            else:
                setting_value_list[key_value] = new_value_str

        saved_settings = config_manager.save_setting(setting_value_list)

        if saved_settings != {}:
            self.settings_saved.emit()
            self.accept()
        else:
            QtWidgets.QMessageBox.critical(self, "Error", E.ERROR_MESSAGES["5002"])

    def update_darkmode(self):
        if self.setting_value_list["darkmode"] == True:
            self.setStyleSheet("""
                        QDialog {background-color: #121212;}
                        QLabel {color: white;}
                        QCheckBox {color: white;}
                        QLineEdit {background-color: #444444;color: white;border: 1px solid #666666;}
                        QDialogButtonBox QPushButton {background-color: #666666;color: white;}""")
        else:
            self.setStyleSheet("")


class CalculatorPrototype(QtWidgets.QWidget):

    def __init__(self):
        super().__init__()

        # --- 1. Load Settings ---
        self.setting_value_list = config_manager.load_settings()

        # --- 2. Calculator core ---
        self.calculator = Calculator(
            bridge=EvaluationBridge(timeouts=config_manager.get_timeouts()),
            focus_requested=self.focus_display,
        )
        self.thread_active = False

        # --- 3. Window Setup ---
        self.button_objects = {}
        self.setWindowTitle("Bifrost Calculator")
        self.resize(420, 620)
        main_v_layout = QtWidgets.QVBoxLayout(self)

        expanding_policy = QtWidgets.QSizePolicy(
            QtWidgets.QSizePolicy.Policy.Expanding,
            QtWidgets.QSizePolicy.Policy.Expanding
        )

        # --- 4. Serial Port Row ---
        port_h_layout = QtWidgets.QHBoxLayout()
        main_v_layout.addLayout(port_h_layout)
        self.port_box = QtWidgets.QComboBox()
        self.port_box.setEditable(True)
        self.port_box.addItems(list_ports())
        self.port_box.setCurrentText(config_manager.get_serial_port())
        self.baudrate_field = QtWidgets.QLineEdit(str(config_manager.get_baudrate()))
        port_h_layout.addWidget(QtWidgets.QLabel("Port:"))
        port_h_layout.addWidget(self.port_box, 2)
        port_h_layout.addWidget(QtWidgets.QLabel("Baud:"))
        port_h_layout.addWidget(self.baudrate_field, 1)

        # --- 5. Input Setup ---
        self.display = QtWidgets.QLineEdit("")
        self.display.setAlignment(Qt.AlignmentFlag.AlignRight)
        font = self.display.font()
        font.setPointSize(24)
        self.display.setFont(font)
        self.display.textEdited.connect(self.handle_text_edited)
        self.display.returnPressed.connect(self.send_expression)
        main_v_layout.addWidget(self.display)

        # --- 6. History ---
        self.history_list = QtWidgets.QListWidget()
        self.history_list.itemClicked.connect(self.handle_history_clicked)
        main_v_layout.addWidget(self.history_list, 1)

        # --- 7. Button Grid Setup ---
        button_container = QtWidgets.QWidget()
        main_v_layout.addWidget(button_container, 3)
        button_grid = QtWidgets.QGridLayout(button_container)
        button_grid.setSpacing(0)
        button_grid.setContentsMargins(0, 0, 0, 0)

        # (key, row, column). Keys are Tokens or the command labels below.
        self.buttons = [
            ('⚙️', 0, 0), ('C', 0, 1), ('Del', 0, 2), (Token.PARENTHESIS, 0, 3), (Token.MODULUS, 0, 4),
            (Token.SIN, 1, 0), (Token.COS, 1, 1), (Token.TAN, 1, 2), (Token.POW, 1, 3), (Token.DIVIDE, 1, 4),
            (Token.LOG, 2, 0), (Token.SEVEN, 2, 1), (Token.EIGHT, 2, 2), (Token.NINE, 2, 3), (Token.MULTIPLY, 2, 4),
            (Token.LN, 3, 0), (Token.FOUR, 3, 1), (Token.FIVE, 3, 2), (Token.SIX, 3, 3), (Token.SUBTRACT, 3, 4),
            (Token.SQRT, 4, 0), (Token.ONE, 4, 1), (Token.TWO, 4, 2), (Token.THREE, 4, 3), (Token.ADD, 4, 4),
            (Token.PI, 5, 0), (Token.ANS, 5, 1), (Token.ZERO, 5, 2), (Token.DOT, 5, 3), ('Send', 5, 4),
        ]

        for key, row, col in self.buttons:
            label = key.label if isinstance(key, Token) else key
            button = QtWidgets.QPushButton(label)
            button.setSizePolicy(expanding_policy)
            button.setFocusPolicy(Qt.FocusPolicy.NoFocus)  # Keep caret/selection in the input field

            if key == '⚙️':
                button.clicked.connect(self.open_settings)
            elif key == 'C':
                button.clicked.connect(self.clear_all)
            elif key == 'Del':
                button.clicked.connect(self.delete_backwards)
            elif key == 'Send':
                button.clicked.connect(self.send_expression)
            else:
                button.clicked.connect(lambda checked=False, token=key: self.handle_button_press(token))

            button_grid.addWidget(button, row, col)
            self.button_objects[label] = button

        self.update_darkmode()

    # --- Editor <-> input field ---
    def pull_display_state(self):
        # The user may have typed, moved the caret or selected with the mouse
        editor = self.calculator.editor
        if self.display.text() != editor.text:
            editor.set_text(self.display.text())
        if self.display.hasSelectedText():
            editor.select(self.display.selectionStart(), len(self.display.selectedText()))
        else:
            editor.set_caret(self.display.cursorPosition())

    def push_display_state(self):
        editor = self.calculator.editor
        self.display.setText(editor.text)
        self.display.setCursorPosition(editor.caret)

    def focus_display(self):
        self.display.setFocus()

    def handle_text_edited(self, text):
        self.calculator.editor.set_text(text, self.display.cursorPosition())

    def handle_button_press(self, token):
        self.pull_display_state()
        self.calculator.insert(token)
        self.push_display_state()

    def delete_backwards(self):
        self.pull_display_state()
        self.calculator.delete()
        self.push_display_state()

    def clear_all(self):
        self.calculator.clear()
        self.history_list.clear()
        self.push_display_state()

    def handle_history_clicked(self, item):
        row = self.history_list.row(item)
        if is_shift_pressed():
            pyperclip.copy(self.calculator.session.history[row].result)
            return
        self.pull_display_state()
        self.calculator.select_history(row)
        self.push_display_state()

    # --- Evaluation ---
    def send_expression(self):
        self.pull_display_state()
        try:
            request = self.calculator.begin_evaluation()
        except E.EvaluationBusyError as e:
            logger.warning("%s", e.message)
            return

        port = self.port_box.currentText().strip()
        baudrate = parse_baudrate(self.baudrate_field.text())

        self.thread_active = True
        self.update_return_button()

        worker_instance = Worker(self.calculator, request, port, baudrate)
        worker_instance.job_finished.connect(self.Calc_result)
        self.worker_instance = worker_instance  # Keep alive until the signal arrives
        my_thread = threading.Thread(target=worker_instance.run_Calc, daemon=True)
        my_thread.start()

    def Calc_result(self, outcome, request):
        self.thread_active = False
        self.update_return_button()
        self.worker_instance = None

        try:
            entry = self.calculator.finish_evaluation(request, outcome)
        except E.BifrostError as error_obj:
            self.show_error(error_obj)
            return

        if entry is not None:
            self.history_list.insertItem(0, str(entry))
            self.push_display_state()
        self.focus_display()

    def show_error(self, error_obj):
        error_box = QtWidgets.QMessageBox(self)
        error_code = error_obj.code
        category, message = E.describe(error_code)
        additional_info = f"Details: {error_obj.message}\nExpression: {error_obj.expression}"
        if isinstance(error_obj, E.ExpressionSyntaxError) and error_obj.details:
            additional_info += f"\nDevice: {error_obj.details}"

        error_box.setIcon(QtWidgets.QMessageBox.Critical)
        error_box.setWindowTitle(category)
        error_box.setText(f"Error {error_code}: {message}")
        error_box.setInformativeText(additional_info)
        error_box.setStandardButtons(QtWidgets.QMessageBox.Ok)
        error_box.setStyleSheet(self.get_message_box_stylesheet())
        error_box.exec()

    def update_return_button(self):
        return_button = self.button_objects.get('Send')
        if not return_button:
            return

        # Disabled and red while the device is busy
        return_button.setEnabled(not self.thread_active)
        if self.thread_active == True:
            return_button.setStyleSheet("background-color: #FF0000; color: white; font-weight: bold;")
            return_button.setText("...")
        else:
            return_button.setStyleSheet("background-color: #007bff; color: white; font-weight: bold;")
            return_button.setText("Send")
        return_button.update()

    def update_darkmode(self):
        if self.setting_value_list["darkmode"] == True:
            for text, button in self.button_objects.items():
                if text != 'Send':
                    button.setStyleSheet("background-color: #121212; color: white; font-weight: bold;")
                    button.update()
            self.setStyleSheet("background-color: #121212; color: white;")
            self.display.setStyleSheet("background-color: #121212; color: white; font-weight: bold;")
        else:
            for text, button in self.button_objects.items():
                if text != 'Send':
                    button.setStyleSheet("font-weight: normal;")
                    button.update()
            self.setStyleSheet("")
            self.display.setStyleSheet("font-weight: bold;")
        self.update_return_button()

    def open_settings(self):
        settings_dialog = SettingsDialog(self)
        settings_dialog.exec()  # Modal

        self.setting_value_list = config_manager.load_settings()
        self.calculator.bridge.timeouts = config_manager.get_timeouts()
        self.update_darkmode()

    def get_message_box_stylesheet(self):
        if self.setting_value_list["darkmode"] == True:
            return """
                QMessageBox {
                    background-color: #121212;
                    color: white;
                }
                QLabel {
                    color: white;
                }
                QPushButton {
                    background-color: #2e2e2e;
                    color: white;
                    border: 1px solid #444444;
                    padding: 5px 15px;
                }
                QPushButton:hover {
                    background-color: #444444;
                }
            """
        else:
            return ""


def main():
    app = QtWidgets.QApplication()
    window = CalculatorPrototype()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
