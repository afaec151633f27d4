"""FibPad – launcher."""

import logging
import sys
from PyQt5.QtWidgets import QApplication
from FibPadWindow import FibPadWindow


def run() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = QApplication(sys.argv)
    window = FibPadWindow()
    window.show()
    sys.exit(app.exec_())


if __name__ == "__main__":
    run()
