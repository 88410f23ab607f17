import logging
import os
import sys
from pathlib import Path

from PyQt6.QtCore import QObject, QThread, QUrl, pyqtSignal
from PyQt6.QtGui import QDesktopServices
from PyQt6.QtWidgets import (
    QApplication, QComboBox, QDialog, QFileDialog, QHBoxLayout, QLabel, QLineEdit,
    QMainWindow, QProgressBar, QPushButton, QVBoxLayout, QWidget,
)

from favicon_generator import generate_favicons
from image_tools import BACKENDS, get_tool

class LogEmitter(QObject):
    message = pyqtSignal(str)

class QtLogHandler(logging.Handler):
    """Forwards log records to a Qt signal so the window can show them."""

    def __init__(self):
        super().__init__(level=logging.INFO)
        self.setFormatter(logging.Formatter("%(message)s"))
        self.emitter = LogEmitter()

    def emit(self, record):
        self.emitter.message.emit(self.format(record))

class Worker(QObject):
    finished = pyqtSignal()
    progress = pyqtSignal(int)
    status = pyqtSignal(str)
    error = pyqtSignal(str)
    done = pyqtSignal(str)

    def __init__(self, image_path, output_root, backend):
        super().__init__()
        self.image_path = image_path
        self.output_root = output_root
        self.backend = backend

    def run(self):
        handler = QtLogHandler()
        handler.emitter.message.connect(self.status)
        logger = logging.getLogger("favicon_generator.gui")
        logger.setLevel(logging.INFO)
        logger.addHandler(handler)

        def report_progress(processed, total):
            self.progress.emit(int(processed / total * 100))

        try:
            result = generate_favicons(
                self.image_path,
                get_tool(self.backend),
                output_root=Path(self.output_root),
                logger=logger,
                progress_callback=report_progress,
            )
            self.done.emit(str(result.output_dir))
        except Exception as e:
            self.error.emit(str(e))
        finally:
            logger.removeHandler(handler)
            self.finished.emit()

class GeneratorWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Favicon Generator")
        self.setFixedSize(600, 200)
        self.output_dir = ""

        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        main_layout = QVBoxLayout()
        central_widget.setLayout(main_layout)

        image_layout = QHBoxLayout()
        self.image_edit = QLineEdit()
        self.image_edit.setPlaceholderText("Select a source image...")
        self.image_edit.setReadOnly(True)
        image_layout.addWidget(self.image_edit)
        browse_image_button = QPushButton("Browse...")
        browse_image_button.clicked.connect(self.browse_image)
        image_layout.addWidget(browse_image_button)
        main_layout.addLayout(image_layout)

        output_layout = QHBoxLayout()
        self.output_edit = QLineEdit(os.getcwd())
        self.output_edit.setReadOnly(True)
        output_layout.addWidget(self.output_edit)
        browse_output_button = QPushButton("Output Folder...")
        browse_output_button.clicked.connect(self.browse_output)
        output_layout.addWidget(browse_output_button)
        self.backend_combo = QComboBox()
        self.backend_combo.addItems(sorted(BACKENDS))
        self.backend_combo.setCurrentText("magick")
        output_layout.addWidget(self.backend_combo)
        main_layout.addLayout(output_layout)

        self.action_button = QPushButton("Generate Icons")
        self.action_button.clicked.connect(self.start_generation)
        main_layout.addWidget(self.action_button)

        self.progress_bar = QProgressBar()
        main_layout.addWidget(self.progress_bar)

        self.status_label = QLabel("Ready")
        main_layout.addWidget(self.status_label)

    def browse_image(self):
        image_path, _ = QFileDialog.getOpenFileName(
            self, "Select Image", os.path.expanduser("~"), "Images (*.png *.jpg *.jpeg *.webp *.svg)"
        )
        if image_path:
            self.image_edit.setText(image_path)

    def browse_output(self):
        directory = QFileDialog.getExistingDirectory(self, "Select Output Folder", self.output_edit.text())
        if directory:
            self.output_edit.setText(directory)

    def start_generation(self):
        image_path = self.image_edit.text()
        if not image_path:
            self.status_label.setText("Please select an image first.")
            return

        self.output_dir = ""
        self.action_button.setEnabled(False)
        self.progress_bar.setValue(0)
        self.status_label.setText(f"Starting generation for: {image_path}")

        self.thread = QThread()
        self.worker = Worker(image_path, self.output_edit.text(), self.backend_combo.currentText())
        self.worker.moveToThread(self.thread)

        self.thread.started.connect(self.worker.run)
        self.worker.finished.connect(self.thread.quit)
        self.worker.finished.connect(self.worker.deleteLater)
        self.thread.finished.connect(self.thread.deleteLater)
        self.worker.progress.connect(self.progress_bar.setValue)
        self.worker.status.connect(self.status_label.setText)
        self.worker.error.connect(self.report_error)
        self.worker.done.connect(self.set_output_dir)
        self.thread.finished.connect(self.on_generation_finished)

        self.thread.start()

    def report_error(self, error):
        self.status_label.setText(f"Error: {error}")

    def set_output_dir(self, output_dir):
        self.output_dir = output_dir

    def on_generation_finished(self):
        self.action_button.setEnabled(True)
        if not self.output_dir:
            return

        dialog = CompletionDialog(self, self.output_dir)
        dialog.exec()
        if dialog.result == "generate_another":
            self.image_edit.clear()
            self.progress_bar.setValue(0)
            self.status_label.setText("Ready")
        elif dialog.result == "exit":
            QApplication.instance().quit()

class CompletionDialog(QDialog):
    def __init__(self, parent=None, output_dir=""):
        super().__init__(parent)
        self.setWindowTitle("Icons Generated")
        self.output_dir = output_dir
        self.result = None

        layout = QVBoxLayout()
        layout.addWidget(QLabel(f"All icons saved in: {output_dir}"))

        button_layout = QHBoxLayout()
        open_folder_button = QPushButton("Open Folder")
        open_folder_button.clicked.connect(self.open_output_folder)
        button_layout.addWidget(open_folder_button)

        another_button = QPushButton("Generate Another")
        another_button.clicked.connect(self.generate_another)
        button_layout.addWidget(another_button)

        exit_button = QPushButton("Exit")
        exit_button.clicked.connect(self.exit_application)
        button_layout.addWidget(exit_button)

        layout.addLayout(button_layout)
        self.setLayout(layout)

    def open_output_folder(self):
        if self.output_dir:
            QDesktopServices.openUrl(QUrl.fromLocalFile(self.output_dir))
        self.result = "open_folder"
        self.accept()

    def generate_another(self):
        self.result = "generate_another"
        self.accept()

    def exit_application(self):
        self.result = "exit"
        self.accept()

def main():
    app = QApplication(sys.argv)
    window = GeneratorWindow()
    window.show()
    return app.exec()

if __name__ == "__main__":
    sys.exit(main())
