import os
import sys

import pytest

# Qt-тесты запускаются без дисплея
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session")
def qapp():
    """Один экземпляр QApplication на весь прогон; ссылка держится до конца сессии."""
    from PyQt5.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    yield app
