import pytest

from CalcEngine import config_manager
from CalcEngine.ExpressionBuffer import ExpressionBuffer


@pytest.fixture
def prefs():
    return config_manager.Preferences()


@pytest.fixture
def buffer(prefs):
    return ExpressionBuffer(prefs)


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    monkeypatch.setattr(config_manager, "config_json", path)
    return path


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    if report.when == "call":
        print(f"TEST: {item.name} - {'PASSED' if report.passed else 'FAILED'}")
