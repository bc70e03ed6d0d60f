"""Entry point for Study Openings: an interactive opening repertoire trainer."""

import sys
from PyQt6.QtWidgets import QApplication

from trainer.config.config_loader import ConfigLoader
from trainer.main_window import MainWindow
from trainer.models.tree_model import RepertoireTreeModel
from trainer.services.error_handler import ErrorHandler
from trainer.services.logging_service import LoggingService


SAMPLE_REPERTOIRE = [
    "e4 e5 Nf3 Nc6 Bb5 a6 Ba4",
    "e4 e5 Nf3 Nc6 Bc4 Bc5",
    "e4 e5 Nf3 Nf6 Nxe5",
    "e4 c5 Nf3 d6 d4 cxd4 Nxd4",
    "e4 c5 Nf3 Nc6 d4",
    "e4 e6 d4 d5 Nc3",
]


def build_sample_repertoire() -> RepertoireTreeModel:
    """Build the repertoire shown on startup."""
    tree_model = RepertoireTreeModel()
    for line in SAMPLE_REPERTOIRE:
        tree_model.add_line(line)
    return tree_model


def main() -> None:
    """Run Study Openings."""
    # Setup global exception handler for uncaught exceptions
    ErrorHandler.setup_exception_handler()

    try:
        app = QApplication(sys.argv)
        app.setApplicationName("Study Openings")

        # Load configuration with strict validation
        config = ConfigLoader().load()
        LoggingService.get_instance(config).initialize()

        window = MainWindow(config, build_sample_repertoire())
        window.show()

        sys.exit(app.exec())
    except Exception as e:
        # Catch any uncaught exceptions during startup or execution
        ErrorHandler.handle_fatal_error(e, "Application execution")


if __name__ == "__main__":
    main()
